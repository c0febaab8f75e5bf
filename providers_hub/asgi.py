"""
ASGI entrypoint: expose `app` pour uvicorn / gestionnaires de processus
(`uvicorn providers_hub.asgi:app`). Toute la configuration est dans app_setup.factory.
"""
from providers_hub.app_setup.factory import create_app

app = create_app()
