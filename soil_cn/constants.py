"""
Constants used across the soil_cn codebase.
"""

from types import MappingProxyType

# Treatment codes are two characters: harvest history then fire treatment
HARVEST_CODES = MappingProxyType({
    'U': 'unharvested',
    'L': 'harvested',
})

FIRE_TREATMENT_CODES = MappingProxyType({
    'N': 'none',
    'R': 'regular',
    'F': 'frequent',
})

# A plot counts as burnt in a year when at least this percentage burned
BURN_THRESHOLD = 20.0

# Cell values read as missing. Blank cells are not in the set: an empty
# standard field marks a field sample.
MISSING_TOKENS = frozenset({'NA', 'N/A', 'NaN', 'nan', 'NULL', 'null'})

# Column schemas: field -> (normalized source aliases, dtype, required).
# Source names are matched after clean_column_names().
RAW_RECORD_SCHEMA = MappingProxyType({
    'core_id': (('core', 'coreid', 'coreno'), 'string', True),
    'plot': (('plot', 'plotid', 'site'), 'integer', True),
    'sticker': (('sticker', 'stickerid', 'label'), 'string', False),
    'standard': (('standard', 'std', 'standardcomposition'), 'string', True),
    'micro_site': (('treeopen', 'microsite', 'tree'), 'string', False),
    'treatment': (('treatment', 'trt', 'treatmentcode'), 'string', True),
    'time_since_fire': (('tsf', 'timesincefire'), 'float', True),
    'n_fires': (('nfires', 'firecount', 'nfire'), 'integer', True),
    'core_depth': (('coredepth', 'depth'), 'float', True),
    'soil_depth': (('soildepth',), 'float', False),
    'topsoil_depth': (('topsoildepth', 'topsoil'), 'float', False),
    'soil_colour': (('soilcolour', 'soilcolor', 'colour'), 'string', False),
    'weight': (('weight', 'weightg', 'mass'), 'float', False),
    'bulk_density': (('bulkdensity', 'bd'), 'float', True),
    'total_c': (('totalc', 'c', 'carbon'), 'float', True),
    'total_n': (('totaln', 'n', 'nitrogen'), 'float', True),
    'seq': (('seq', 'seqno', 'row', 'sequence'), 'integer', False),
})

TOPOGRAPHY_SCHEMA = MappingProxyType({
    'plot': (('plot', 'plotid', 'site'), 'integer', True),
    'easting': (('easting', 'x'), 'float', False),
    'northing': (('northing', 'y'), 'float', False),
    'aspect': (('aspect',), 'float', False),
    'slope': (('slope',), 'float', False),
    'elevation': (('elevation', 'elev', 'dem'), 'float', False),
    'wetness': (('wetness', 'twi', 'wetnessindex'), 'float', False),
    'solar': (('solar', 'solarradiation', 'insolation'), 'float', False),
})

FIRE_HISTORY_SCHEMA = MappingProxyType({
    'plot_label': (('plot', 'plotlabel', 'plotname', 'site'), 'string', True),
    'year': (('year', 'fireyear'), 'integer', True),
    'burn_percent': (('burnpercent', 'percentburnt', 'pctburnt', 'burnt'), 'float', True),
})

# Columns of a standard (calibration) record
STANDARD_COLUMNS = ['core_id', 'sticker', 'standard', 'total_c', 'total_n']

# Replicate measurements averaged per core
AVERAGED_COLUMNS = ['total_c', 'total_n']

# Per-replicate bookkeeping columns not carried to the core table
REPLICATE_ONLY_COLUMNS = ['sticker', 'standard', 'seq', 'record_class']

# Site-level fields repeated on every field row of a plot
SITE_COLUMNS = ['plot', 'treatment', 'time_since_fire', 'n_fires']

TOPOGRAPHY_COLUMNS = [
    'easting', 'northing', 'aspect', 'slope', 'elevation', 'wetness', 'solar'
]

# Logical names of the persisted tables
TABLE_KEYS = MappingProxyType({
    'standards': 'standards',
    'sample_means': 'sample_means',
    'sites': 'sites',
    'fires': 'fires',
    'fire_severity': 'fire_severity',
    'analysis': 'analysis',
})
