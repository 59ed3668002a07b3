"""
Portainer commands
"""

import typer
from typing import Optional

from ..core.errors import AdminError, ValidationError
from ..core.portainer import PortainerInstaller, PortInUseError, check_port, port_in_use
from ..core.runner import require_root
from ..core.validators import validate_port
from ..utils.display import console, print_error, print_info, print_success
from ..utils.logger import log_exception
from ..utils.prompts import prompt_validated
from .context import get_context, reporting_errors

app = typer.Typer()


@app.command("install")
def install(
    ctx: typer.Context,
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Host port for the web UI"),
):
    """🐳 Install Portainer CE"""
    state = get_context(ctx)
    settings = state.settings.portainer
    installer = PortainerInstaller(
        state.settings,
        state.runner,
        client_factory=state.docker_client_factory,
        notify=print_info,
    )

    with reporting_errors("Cannot install Portainer"):
        require_root(state.runner)
        installer.ensure_docker()

    candidate = port
    attempt = 0
    while True:
        attempt += 1
        if candidate is None:
            candidate = prompt_validated(
                "Port for Portainer", validate_port, default=str(settings.default_port)
            )

        try:
            chosen = check_port(candidate, in_use=port_in_use)
            urls = installer.install(chosen)
            break
        except PortInUseError as e:
            print_error(str(e))
            if attempt >= settings.max_port_attempts:
                print_error(f"Giving up after {attempt} attempts")
                raise typer.Exit(1)
            if not typer.confirm("Do you want to try another port?", default=False):
                raise typer.Exit(1)
            candidate = None
        except ValidationError as e:
            log_exception(e, "Invalid port")
            raise typer.Exit(1)
        except AdminError as e:
            log_exception(e, "Portainer installation failed")
            raise typer.Exit(1)

    print_success("Portainer CE installed successfully!")
    console.print(f"🌐 Access: {urls[0]}")
    console.print(f"💻 Or locally: {urls[1]}")
