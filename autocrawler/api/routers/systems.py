from fastapi import APIRouter


def create_systems_router(container_env: dict, secret_keys=frozenset()):
    """Create systems router with access to container environment config."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        return {"status": "ok"}

    @router.get("/config")
    def get_config():
        """Return current environment configuration values (secrets masked)."""
        def shown(key, value):
            if value is None:
                return None
            if key in secret_keys:
                return "***"
            return str(value)

        return {
            "environment": {
                key: shown(key, value)
                for key, value in container_env.items()
            }
        }

    return router
