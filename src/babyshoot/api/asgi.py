"""ASGI app for the photoshoot API, wired to Supabase and Astria from env settings.

Serverless deployments import ``app`` from here through ``api/index.py``.
"""

from babyshoot.api.app import create_app
from babyshoot.containers import build_container

app = create_app(build_container())
