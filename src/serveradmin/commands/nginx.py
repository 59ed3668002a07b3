"""
Nginx commands
Installation and reverse-proxy virtual hosts
"""

import typer
from typing import Optional

import pydantic

from ..core.errors import ValidationError
from ..core.hosts import add_entry, local_ip
from ..core.installers import Installer
from ..core.runner import require_root
from ..core.validators import (
    normalize_service_name, validate_domain, validate_port, validate_service_name
)
from ..core.vhosts import VhostManager, VhostState, VirtualHost
from ..utils.display import (
    console, create_vhosts_table, format_enabled, print_error, print_info, print_success,
    print_warning,
)
from ..utils.prompts import prompt_validated
from .context import get_context, reporting_errors
from .packages import report_status

app = typer.Typer()
vhost_app = typer.Typer()
app.add_typer(vhost_app, name="vhost", help="🌐 Manage reverse-proxy virtual hosts")


def _manager(ctx: typer.Context) -> VhostManager:
    state = get_context(ctx)
    return VhostManager(state.settings, state.runner, warn=print_warning)


@app.command("install")
def install(ctx: typer.Context):
    """📦 Install Nginx"""
    state = get_context(ctx)
    installer = Installer(state.settings, state.runner, notify=print_info)
    with reporting_errors("Nginx installation failed"):
        require_root(state.runner)
        print_info("Checking whether Nginx is already installed...")
        report_status("Nginx", installer.install_nginx())


def _checked(value: str, validator) -> str:
    ok, reason = validator(value)
    if not ok:
        raise ValidationError(reason)
    return value


def show_vhost_summary(manager: VhostManager, vhost: VirtualHost):
    name = vhost.service_name
    log_dir = manager.nginx.log_dir

    console.print("\n[green bold]🎉 CONFIGURATION COMPLETE![/green bold]")
    console.print(f"📋 Service: {name}")
    console.print(f"🌐 Domain: {vhost.domain}")
    console.print(f"🔢 Service port: {vhost.port}")
    console.print(f"🔒 SSL: {'Enabled' if vhost.ssl else 'Disabled'}")

    console.print("\n🔗 Access URLs:")
    if vhost.ssl:
        console.print(f"   HTTPS: https://{vhost.domain}")
        console.print(f"   HTTP: http://{vhost.domain} (redirects to HTTPS)")
    else:
        console.print(f"   HTTP: http://{vhost.domain}")

    console.print("\n📁 Configuration files:")
    console.print(f"   Config: {manager.config_path(name)}")
    console.print(f"   Enabled: {manager.enabled_path(name)}")
    if vhost.ssl:
        console.print(f"   Certificate: {manager.cert_dir(name)}/")

    console.print("\n📊 Logs:")
    console.print(f"   Access: {log_dir}/{name}_access.log")
    console.print(f"   Error: {log_dir}/{name}_error.log\n")


@vhost_app.command("add")
def add(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Service name (config file name)"),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Domain, e.g. app.example.com"),
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Local port of the service"),
    ssl: Optional[bool] = typer.Option(None, "--ssl/--no-ssl", help="Enable HTTPS with a self-signed certificate"),
    hosts: Optional[bool] = typer.Option(None, "--hosts/--no-hosts", help="Add the domain to the hosts file"),
):
    """➕ Configure a reverse-proxy service"""
    manager = _manager(ctx)
    state = get_context(ctx)

    with reporting_errors("Cannot configure service"):
        require_root(manager.runner)
        manager.check_installed()

        if name is None:
            name = prompt_validated(
                "🔤 Service name (e.g. myservice)", validate_service_name,
                transform=normalize_service_name,
            )
        else:
            name = _checked(normalize_service_name(name), validate_service_name)

        if domain is None:
            domain = prompt_validated(
                "🌐 Domain (e.g. app.mydomain.com)", validate_domain,
                transform=lambda value: value.strip().lower(),
            )
        else:
            domain = _checked(domain.strip().lower(), validate_domain)

        if port is None:
            port = prompt_validated("🔢 Service port (e.g. 3000, 8080)", validate_port)
        else:
            port = _checked(port.strip(), validate_port)

    if ssl is None:
        ssl = typer.confirm("🔒 Enable HTTPS/SSL?", default=False)

    try:
        vhost = VirtualHost(service_name=name, domain=domain, port=port, ssl=ssl)
    except pydantic.ValidationError as e:
        print_error(f"Invalid service definition: {e}")
        raise typer.Exit(1)

    print_info(f"Creating Nginx configuration for {vhost.domain}...")
    with reporting_errors(f"Failed to enable {vhost.service_name}"):
        result = manager.add(vhost)

    if result != VhostState.ENABLED:
        console.print(f"[red]❌ Service {vhost.service_name} is {result.value}, not enabled[/red]")
        raise typer.Exit(1)
    print_success(f"Configuration created: {manager.config_path(vhost.service_name)}")
    print_success("Nginx configuration is valid and Nginx was reloaded")

    if hosts is None:
        hosts = typer.confirm(f"🌍 Configure local DNS in {state.settings.hosts_file}?", default=False)
    if hosts:
        ip = local_ip(state.runner)
        if add_entry(state.settings.hosts_file, vhost.domain, ip, vhost.service_name):
            print_success(f"Local DNS configured: {vhost.domain} -> {ip}")
        else:
            print_warning(f"Domain {vhost.domain} already exists in {state.settings.hosts_file}")

    show_vhost_summary(manager, vhost)


@vhost_app.command("list")
def list_vhosts(ctx: typer.Context):
    """📋 List configured services"""
    manager = _manager(ctx)
    vhosts = manager.list()

    if not vhosts:
        console.print("[yellow]No services configured[/yellow]")
        return

    table = create_vhosts_table()
    for vhost in vhosts:
        table.add_row(
            vhost.name,
            vhost.domain or "?",
            str(vhost.port) if vhost.port else "?",
            "yes" if vhost.ssl else "no",
            format_enabled(vhost.enabled),
        )
    console.print(table)


@vhost_app.command("rm")
def remove(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Service name"),
    delete_config: Optional[bool] = typer.Option(
        None, "--delete-config/--keep-config", help="Also delete the config file and certificate"
    ),
):
    """🗑️  Disable or delete a service"""
    manager = _manager(ctx)

    with reporting_errors("Cannot remove service"):
        require_root(manager.runner)
        manager.check_installed()

        if name is None:
            list_vhosts(ctx)
            name = typer.prompt("🔤 Service name to remove").strip()
        name = _checked(normalize_service_name(name), validate_service_name)

        if delete_config is None and manager.config_path(name).exists():
            delete_config = typer.confirm("🗑️  Remove the configuration file too?", default=False)

        removed = manager.remove(name, delete_config=bool(delete_config))

    for path in removed:
        print_success(f"Removed {path}")
    if removed:
        print_success("Nginx reloaded")
