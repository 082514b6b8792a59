from claimdesk.models.patient import Patient  # noqa: F401
from claimdesk.models.pharmacy import Pharmacy  # noqa: F401
from claimdesk.models.csv_upload import CsvUpload  # noqa: F401
from claimdesk.models.claim import Claim  # noqa: F401
