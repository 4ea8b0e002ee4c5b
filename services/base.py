"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject mock services for testing.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config is ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        """Initialize services with configuration.

        Args:
            config: Config object containing application configuration.
            db_manager: Optional database manager for dependency injection (testing).
                       If None, creates DatabaseManager from config.
        """
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryService
        from services.category_tree import CategoryTreeService
        from services.service_records import ServiceRecordService
        from services.images import ImageStorage

        self.categories = CategoryService(self.db_manager)
        self.service_records = ServiceRecordService(self.db_manager)
        self.category_tree = CategoryTreeService(
            self.db_manager,
            self.categories,
            self.service_records,
            max_subtree_depth=config.max_subtree_depth,
        )
        self.images = ImageStorage(config.uploads_dir, config.uploads_url_prefix)
