"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse, Response

from registration_desk.api.models import CapabilitiesPayload, PlanView
from registration_desk.config import form_url
from registration_desk.domain.registrations import RegistrationFilter

if TYPE_CHECKING:
    from registration_desk.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or not secrets.compare_digest(
        x_admin_token.encode(), admin_token.encode()
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def registration_filter(  # noqa: PLR0913
    name: str = "",
    mandalam: str = "",
    mekhala: str = "",
    unit: str = "",
    min_age: int | None = None,
    max_age: int | None = None,
) -> RegistrationFilter:
    """Build a filter from dashboard query parameters."""
    return RegistrationFilter(
        name=name,
        mandalam=mandalam,
        mekhala=mekhala,
        unit=unit,
        min_age=min_age,
        max_age=max_age,
    )


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/registrations", dependencies=[Depends(require_admin)])
async def list_registrations(
    request: Request, filters: RegistrationFilter = Depends(registration_filter)
) -> dict[str, object]:
    """Return registrations newest first."""
    container: AppContainer = request.app.state.container
    return {"registrations": container.admin_service.list_summaries(filters)}


@router.get("/registrations.csv", dependencies=[Depends(require_admin)])
async def export_csv(
    request: Request, filters: RegistrationFilter = Depends(registration_filter)
) -> Response:
    """Download filtered registrations as CSV."""
    container: AppContainer = request.app.state.container
    return Response(
        content=container.admin_service.export_csv(filters),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="registrations.csv"'},
    )


@router.get("/registrations.pdf", dependencies=[Depends(require_admin)])
async def export_pdf(
    request: Request, filters: RegistrationFilter = Depends(registration_filter)
) -> Response:
    """Download filtered registrations as a table PDF."""
    container: AppContainer = request.app.state.container
    return Response(
        content=container.admin_service.export_pdf(filters),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="registrations.pdf"'},
    )


@router.get("/share-form", dependencies=[Depends(require_admin)])
async def share_form(
    request: Request, capabilities: CapabilitiesPayload = Depends()
) -> PlanView:
    """Return how to share the public form link."""
    container: AppContainer = request.app.state.container
    plan = container.sharing_service.form_link_plan(
        form_url(container.settings.public_base_url),
        capabilities.to_capabilities(),
    )
    return PlanView.from_plan(plan)


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


_ADMIN_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Registration Desk Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 200px; margin-right: 0.5rem; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Registration Desk Admin</h1>
    <div class="row">
      <label>Admin token</label><br />
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <input id="name" placeholder="Name" />
      <input id="mandalam" placeholder="Mandalam" />
      <input id="mekhala" placeholder="Mekhala" />
      <input id="unit" placeholder="Unit" />
      <input id="min_age" type="number" placeholder="Min age" />
      <input id="max_age" type="number" placeholder="Max age" />
    </div>
    <div class="row">
      <button onclick="loadRegistrations()">Registrations</button>
      <button onclick="download('/admin/registrations.csv', 'registrations.csv')">
        Export CSV
      </button>
      <button onclick="download('/admin/registrations.pdf', 'registrations.pdf')">
        Export PDF
      </button>
      <button onclick="shareForm()">Share form</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      const FILTERS = ['name', 'mandalam', 'mekhala', 'unit', 'min_age', 'max_age'];

      function query() {
        const params = new URLSearchParams();
        for (const key of FILTERS) {
          const value = document.getElementById(key).value.trim();
          if (value) params.set(key, value);
        }
        return params.toString();
      }

      function headers() {
        return { 'X-Admin-Token': document.getElementById('token').value };
      }

      async function loadRegistrations() {
        const output = document.getElementById('output');
        output.textContent = 'Loading...';
        const res = await fetch('/admin/registrations?' + query(), {
          headers: headers()
        });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }

      async function download(path, filename) {
        const res = await fetch(path + '?' + query(), { headers: headers() });
        if (!res.ok) {
          document.getElementById('output').textContent = 'Error: ' + res.status;
          return;
        }
        const link = document.createElement('a');
        link.href = URL.createObjectURL(await res.blob());
        link.download = filename;
        link.click();
        URL.revokeObjectURL(link.href);
      }

      async function shareForm() {
        const output = document.getElementById('output');
        const params = new URLSearchParams({
          can_share: Boolean(navigator.share),
          clipboard: Boolean(navigator.clipboard)
        });
        const res = await fetch('/admin/share-form?' + params, { headers: headers() });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const plan = await res.json();
        if (plan.channel === 'clipboard') {
          await navigator.clipboard.writeText(plan.url);
          output.textContent = 'Form link copied: ' + plan.url;
        }
        if (navigator.share) {
          try {
            await navigator.share({
              title: plan.title, text: plan.text, url: plan.url
            });
          } catch (err) {
            if (err.name !== 'AbortError') output.textContent = 'Share failed.';
          }
        } else if (plan.channel !== 'clipboard') {
          output.textContent = plan.url;
        }
      }
    </script>
  </body>
</html>
"""
