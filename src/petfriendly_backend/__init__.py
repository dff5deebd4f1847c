"""
PetFriendly Backend - REST API for a pet adoption platform

This package provides a FastAPI-based web service connecting adopters with
animal foundations. It enables:

- Account registration and JWT login
- Foundation, pet and pet photo management
- Adoption requests with a reviewed PENDING -> APPROVED/REJECTED/CANCELLED lifecycle
- Contact messages from visitors to foundations
- Counts and statistics for dashboards

Key Components:
    - main: FastAPI application, middleware and error handlers
    - routers: One APIRouter per resource under /api/v1, plus /actuator
    - *_service: Business rules per entity
    - repositories / database: SQLite persistence
    - middleware / security: Route authorization table, hashing and tokens
    - configuration: OmegaConf settings with environment overrides

Usage:
    Run the API server with:
        uvicorn petfriendly_backend.main:app --reload --host 0.0.0.0 --port 8080

    API docs are served at /swagger-ui once the server is running.
"""
