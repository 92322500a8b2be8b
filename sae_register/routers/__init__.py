from sae_register.routers.healthz.router import router as healthz

__all__ = [
    "healthz",
]
