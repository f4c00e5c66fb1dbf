"""Global configuration: tolerances, defaults, IFC relationship names."""

# Absolute tolerance for numeric equals / notEquals.
# Absorbs floating-point noise from upstream unit conversion.
NUMERIC_TOLERANCE = 1e-4

# Top-level combination mode when a rule does not declare one
DEFAULT_MODE = "all"

# Identity given to ad hoc rules built by RuleEngine.query()
INLINE_RULE_ID = "inline-query"
INLINE_RULE_NAME = "Inline Query"

# How many existing namespace / system names a validation warning suggests
MAX_SUGGESTIONS = 5

# An entity is indexed only if one of these appears in its ancestry chain.
# IfcSpatialStructureElement (site, building, storey, space) descends from
# IfcProduct, so spatial kinds are covered as well.
PRODUCT_ROOT_CLASSES = ("IfcProduct",)

# Default +/- window used by RuleBuilder.on_storey_at_elevation
STOREY_ELEVATION_TOLERANCE = 1.0

# Relationship entity names, upper-case STEP form
REL_DEFINES_BY_PROPERTIES = "IFCRELDEFINESBYPROPERTIES"
REL_DEFINES_BY_TYPE = "IFCRELDEFINESBYTYPE"
REL_CONTAINED_IN_SPATIAL_STRUCTURE = "IFCRELCONTAINEDINSPATIALSTRUCTURE"
REL_AGGREGATES = "IFCRELAGGREGATES"
REL_CONNECTS_ELEMENTS = "IFCRELCONNECTSELEMENTS"
REL_CONNECTS_PATH_ELEMENTS = "IFCRELCONNECTSPATHELEMENTS"
REL_VOIDS_ELEMENT = "IFCRELVOIDSELEMENT"
REL_FILLS_ELEMENT = "IFCRELFILLSELEMENT"

# Positional attribute slots shared by every IfcRoot / IfcElement subtype
ATTR_GLOBAL_ID = 0
ATTR_NAME = 2
ATTR_DESCRIPTION = 3
ATTR_OBJECT_TYPE = 4
ATTR_TAG = 7
ATTR_PREDEFINED_TYPE = 8
