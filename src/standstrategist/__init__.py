"""Stand Strategist profile data core.

Field-data collection profiles: observable stores, debounced autosave, a
deterministic multi-profile merge and the import/export operation pipeline.
"""

__version__ = "0.1.0"
