"""
Base service layer shared by resource services
"""

import logging
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")
RepositoryT = TypeVar("RepositoryT")


class NotFoundError(Exception):
    """Raised when a record looked up by id does not exist"""

    def __init__(self, resource: str, record_id):
        self.resource = resource
        self.record_id = record_id
        self.message = f"{resource} with ID {record_id} not found"
        super().__init__(self.message)


class BaseService(Generic[RepositoryT]):
    """Base service that wraps a repository for one resource"""

    def __init__(self, resource_name: str, repository: RepositoryT):
        self.resource_name = resource_name
        self.repository = repository
        logger.debug(f"BaseService initialized for resource: {resource_name}")

    def _require(self, record: Optional[RecordT], record_id) -> RecordT:
        """Return the record, or raise NotFoundError when the lookup came back empty"""
        if record is None:
            raise NotFoundError(self.resource_name, record_id)
        return record
