from claimdesk.upload.coercion import format_currency, parse_currency, parse_milestone_flag  # noqa: F401
from claimdesk.upload.column_maps import (  # noqa: F401
    CLAIM_SYNONYMS, UNMAPPED, ColumnMapping, ColumnMappingEntry, map_columns, normalize_header,
)
from claimdesk.upload.csv_reader import CSVFormatError, ParsedCSV, parse_csv  # noqa: F401
from claimdesk.upload.sources import ImportSource, RawCsvImport, StorageRowsImport  # noqa: F401
from claimdesk.upload.transformer import (  # noqa: F401
    AMOUNT_FIELDS, REQUIRED_DEFAULTS, TARGET_FIELDS, ClaimRowMapper,
    iter_transformed_rows, transform_rows,
)
