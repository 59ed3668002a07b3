"""
Nginx configuration builder
Typed server-block tree rendered to nginx syntax, plus the reverse-proxy template
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

INDENT = "    "

# Characters that force an argument to be quoted
_NEEDS_QUOTES = re.compile(r"[\s;{}\"'#]")

SSL_PROTOCOLS = ["TLSv1.2", "TLSv1.3"]
SSL_CIPHERS = (
    "ECDHE-RSA-AES256-GCM-SHA512:DHE-RSA-AES256-GCM-SHA512:"
    "ECDHE-RSA-AES256-GCM-SHA384:DHE-RSA-AES256-GCM-SHA384"
)
SECURITY_HEADERS = [
    ("X-Frame-Options", "SAMEORIGIN"),
    ("X-XSS-Protection", "1; mode=block"),
    ("X-Content-Type-Options", "nosniff"),
    ("Referrer-Policy", "no-referrer-when-downgrade"),
]
STATIC_ASSET_PATTERN = r"\.(jpg|jpeg|png|gif|ico|css|js)$"
PROXY_TIMEOUT = 60


def quote(arg: str) -> str:
    """Quote an argument when it would otherwise change the parse"""
    if arg and not _NEEDS_QUOTES.search(arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass
class Directive:
    """A simple `name arg...;` statement"""
    name: str
    args: List[str] = field(default_factory=list)

    def render(self, depth: int = 0) -> List[str]:
        parts = [self.name] + [quote(str(a)) for a in self.args]
        return [f"{INDENT * depth}{' '.join(parts)};"]


@dataclass
class Comment:
    text: str

    def render(self, depth: int = 0) -> List[str]:
        return [f"{INDENT * depth}# {line}" for line in self.text.splitlines()]


@dataclass
class Blank:
    def render(self, depth: int = 0) -> List[str]:
        return [""]


Node = Union[Directive, Comment, Blank, "Block"]


@dataclass
class Block:
    """A `name arg... { ... }` context"""
    name: str
    args: List[str] = field(default_factory=list)
    children: List[Node] = field(default_factory=list)

    def add(self, name: str, *args) -> "Block":
        self.children.append(Directive(name, [str(a) for a in args]))
        return self

    def comment(self, text: str) -> "Block":
        self.children.append(Comment(text))
        return self

    def blank(self) -> "Block":
        self.children.append(Blank())
        return self

    def block(self, block: "Block") -> "Block":
        self.children.append(block)
        return self

    def render(self, depth: int = 0) -> List[str]:
        # Location modifiers and regexes are emitted verbatim
        header = " ".join([self.name] + [str(a) for a in self.args])
        lines = [f"{INDENT * depth}{header} {{"]
        for child in self.children:
            lines.extend(child.render(depth + 1))
        lines.append(f"{INDENT * depth}}}")
        return lines


def render(nodes: List[Node]) -> str:
    lines: List[str] = []
    for node in nodes:
        lines.extend(node.render())
    return "\n".join(lines) + "\n"


# ============================================================
# Reverse proxy template
# ============================================================

def proxy_location(port: int) -> Block:
    location = Block("location", ["/"])
    location.add("proxy_pass", f"http://localhost:{port}")
    location.add("proxy_http_version", "1.1")
    location.add("proxy_set_header", "Upgrade", "$http_upgrade")
    location.add("proxy_set_header", "Connection", "upgrade")
    location.add("proxy_set_header", "Host", "$host")
    location.add("proxy_set_header", "X-Real-IP", "$remote_addr")
    location.add("proxy_set_header", "X-Forwarded-For", "$proxy_add_x_forwarded_for")
    location.add("proxy_set_header", "X-Forwarded-Proto", "$scheme")
    location.add("proxy_cache_bypass", "$http_upgrade")
    location.add("proxy_connect_timeout", PROXY_TIMEOUT)
    location.add("proxy_send_timeout", PROXY_TIMEOUT)
    location.add("proxy_read_timeout", PROXY_TIMEOUT)
    return location


def static_assets_location() -> Block:
    location = Block("location", ["~*", STATIC_ASSET_PATTERN])
    location.add("expires", "1y")
    location.add("add_header", "Cache-Control", "public, immutable")
    return location


def _add_logs(server: Block, service_name: str, log_dir: Path):
    server.blank().comment("Logs")
    server.add("access_log", f"{log_dir}/{service_name}_access.log")
    server.add("error_log", f"{log_dir}/{service_name}_error.log")


def build_vhost(
    service_name: str,
    domain: str,
    port: int,
    ssl: bool,
    cert_file: Optional[Path] = None,
    key_file: Optional[Path] = None,
    log_dir: Path = Path("/var/log/nginx"),
) -> str:
    """
    Reverse-proxy virtual host for one service

    With ssl the HTTP server only redirects to HTTPS and the HTTPS server
    carries the certificate, TLS policy and security headers.
    """
    if ssl and (cert_file is None or key_file is None):
        raise ValueError("cert_file and key_file are required when ssl is enabled")

    nodes: List[Node] = [
        Comment(f"Configuration for {service_name}\nDomain: {domain}\nService port: {port}"),
        Blank(),
    ]

    if ssl:
        redirect = Block("server")
        redirect.add("listen", 80)
        redirect.add("server_name", domain)
        redirect.add("return", 301, "https://$server_name$request_uri")
        nodes += [redirect, Blank()]

        server = Block("server")
        server.add("listen", 443, "ssl", "http2")
        server.add("server_name", domain)
        server.blank()
        server.add("ssl_certificate", cert_file)
        server.add("ssl_certificate_key", key_file)
        server.add("ssl_protocols", *SSL_PROTOCOLS)
        server.add("ssl_ciphers", SSL_CIPHERS)
        server.add("ssl_prefer_server_ciphers", "off")
        server.blank()
        server.block(proxy_location(port))
        server.blank().comment("Security headers")
        for header, value in SECURITY_HEADERS:
            server.add("add_header", header, value, "always")
    else:
        server = Block("server")
        server.add("listen", 80)
        server.add("server_name", domain)
        server.blank()
        server.block(proxy_location(port))

    server.blank().comment("Static asset caching")
    server.block(static_assets_location())
    _add_logs(server, service_name, log_dir)
    nodes.append(server)
    return render(nodes)


_SERVER_NAME_RE = re.compile(r"^\s*server_name\s+([^;\s]+)", re.MULTILINE)
_PROXY_PASS_RE = re.compile(r"^\s*proxy_pass\s+\S*?:(\d+)", re.MULTILINE)
_SSL_RE = re.compile(r"^\s*listen\s+443\b", re.MULTILINE)


def parse_vhost(text: str) -> dict:
    """Domain, upstream port and SSL flag of a generated config"""
    domain = _SERVER_NAME_RE.search(text)
    port = _PROXY_PASS_RE.search(text)
    return {
        "domain": domain.group(1) if domain else None,
        "port": int(port.group(1)) if port else None,
        "ssl": bool(_SSL_RE.search(text)),
    }
