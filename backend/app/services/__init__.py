from app.services.id_allocator import IdentifierAllocator, id_allocator
from app.services.problem_service import ProblemService
from app.services.bulk_import import BulkImportService, ImportOutcome, import_problems
from app.services.csv_template import download_template

# Supporting services
from app.services.lead_service import LeadService
from app.services.analytics_service import AnalyticsService

__all__ = [
    # Problem statements
    "IdentifierAllocator",
    "id_allocator",
    "ProblemService",
    "BulkImportService",
    "ImportOutcome",
    "import_problems",
    "download_template",
    # Supporting services
    "LeadService",
    "AnalyticsService",
]
