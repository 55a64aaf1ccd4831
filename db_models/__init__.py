# Import every model so Base.metadata knows all fleet tables.
from db_models.tractor import Tractor, TractorStatus  # noqa: F401
from db_models.tractor_history import TractorHistory  # noqa: F401
from db_models.tractor_comment import TractorComment  # noqa: F401
from db_models.tractor_issue import TractorIssue, IssueSeverity  # noqa: F401
