"""
Event Topics for ztile

All pub/sub topics published by the layout manager are defined here.
Topic naming convention: <category>.<action>

The resolver, validator, divider mapper and override store never publish;
only LayoutManager does, after its own state has been updated.
"""

# Override events
OVERRIDE_CHANGED = "override.changed"
"""Published when a divider drag stored a new override.
Params: layout_id, monitor_key, split_path"""

OVERRIDE_RESET = "override.reset"
"""Published when overrides for a layout were cleared.
Params: layout_id, monitor_key (None when every monitor was cleared)"""

# Layout registry events
LAYOUT_ADDED = "layout.added"
"""Published when a layout is registered. Params: layout_id"""

LAYOUT_REMOVED = "layout.removed"
"""Published when a layout is unregistered. Params: layout_id"""
