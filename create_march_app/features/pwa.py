"""Progressive Web App support."""

from __future__ import annotations

import logging

from ..answers import Frontend
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

SERVICE_WORKER = """\
const CACHE_NAME = "app-cache-v1";
const PRECACHE_URLS = ["/", "/manifest.json"];

self.addEventListener("install", (event) => {
  event.waitUntil(caches.open(CACHE_NAME).then((cache) => cache.addAll(PRECACHE_URLS)));
});

self.addEventListener("fetch", (event) => {
  event.respondWith(caches.match(event.request).then((cached) => cached || fetch(event.request)));
});
"""

ICON_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 512 512">
  <rect width="512" height="512" rx="96" fill="#0f172a"/>
  <text x="50%" y="56%" font-size="240" text-anchor="middle" fill="#ffffff" font-family="sans-serif">M</text>
</svg>
"""


def web_manifest(name: str) -> dict:
    return {
        "name": name,
        "short_name": name[:12],
        "start_url": "/",
        "display": "standalone",
        "background_color": "#ffffff",
        "theme_color": "#0f172a",
        "categories": ["business", "productivity"],
        "icons": [{"src": "/icons/icon.svg", "sizes": "any", "type": "image/svg+xml", "purpose": "any maskable"}],
    }


async def setup_pwa(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up PWA...")
    fs = services.fs
    public = ctx.app_path / "public"

    if ctx.answers.is_nextjs:
        await services.install(ctx, ["@ducanh2912/next-pwa"], ctx.app_path)
    elif ctx.answers.frontend is Frontend.VITE:
        await services.install(ctx, ["vite-plugin-pwa"], ctx.app_path, dev=True)

    await fs.write_json(public / "manifest.json", web_manifest(ctx.project_name))
    await fs.write_file(public / "sw.js", SERVICE_WORKER)
    await fs.write_file(public / "icons" / "icon.svg", ICON_SVG)
    log_success(logger, "PWA setup completed")
