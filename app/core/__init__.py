"""
Core Application - Infrastructure & Base Classes

Shared building blocks used by every storefront app. Nothing in here knows
about products, orders or payment providers.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError,
      ConflictError, ExternalServiceError

Permissions (import from core.permissions):
    - IsStaffUser: DRF permission for store administrators

Views (import from core.views):
    - health_check: Liveness endpoint for load balancers
"""
