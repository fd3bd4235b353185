"""
Hostname to surface resolution.

Every request is routed by its Host header:

    faith-interactive.com / www.faith-interactive.com   -> marketing
    platform.faith-interactive.com                      -> platform (vendor staff)
    admin.faith-interactive.com                         -> admin (church dashboard)
    <slug>.faith-interactive.com                        -> tenant (church public site)
    anything-else.org                                   -> tenant, slug resolved from the custom domain

``localhost`` / ``*.localhost`` and the local domain (``faith-interactive.local``)
classify exactly like production but report ``is_local=True``.

The parser is total: it never raises, and empty or garbage input falls back
to the marketing surface.
"""
import enum
import ipaddress
import re
from dataclasses import dataclass
from typing import Optional


class Surface(str, enum.Enum):
    """Top-level application surfaces."""
    MARKETING = 'marketing'
    PLATFORM = 'platform'
    ADMIN = 'admin'
    TENANT = 'tenant'


@dataclass(frozen=True)
class HostnameConfig:
    production_domain: str = 'faith-interactive.com'
    local_domain: str = 'faith-interactive.local'
    platform_subdomain: str = 'platform'
    admin_subdomain: str = 'admin'
    local_port: int = 5000


DEFAULT_HOSTNAME_CONFIG = HostnameConfig()


@dataclass(frozen=True)
class ParsedHostname:
    surface: Surface
    church_slug: Optional[str]
    is_local: bool
    original_host: str


# System words that can never be a church slug
RESERVED_SLUGS = frozenset({
    'www', 'api', 'app', 'admin', 'platform', 'dashboard',
    'login', 'logout', 'register', 'signup', 'signin', 'auth',
    'static', 'assets', 'public', 'cdn', 'mail', 'email',
    'support', 'help', 'docs', 'blog', 'status', 'health',
})

_HOSTNAME_RE = re.compile(r'^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?(\.[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?)*$')
_SLUG_RE = re.compile(r'^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$')

_ROUTE_PREFIXES = {
    Surface.MARKETING: '/m',
    Surface.PLATFORM: '/p',
    Surface.ADMIN: '/a',
    Surface.TENANT: '/t',
}


def hostname_config_from_app(config) -> HostnameConfig:
    """Build a HostnameConfig from a Flask config mapping."""
    return HostnameConfig(
        production_domain=(config.get('PRODUCTION_DOMAIN') or DEFAULT_HOSTNAME_CONFIG.production_domain).lower(),
        local_domain=(config.get('LOCAL_DOMAIN') or DEFAULT_HOSTNAME_CONFIG.local_domain).lower(),
        local_port=int(config.get('LOCAL_PORT') or DEFAULT_HOSTNAME_CONFIG.local_port),
    )


def normalize_hostname(host) -> str:
    """Lowercase, trim, and strip the port (IPv6 literal aware) and trailing dot."""
    if not host or not isinstance(host, str):
        return ''
    host = host.strip().lower()
    if host.startswith('['):
        end = host.find(']')
        return host[1:end] if end != -1 else host[1:]
    if host.count(':') == 1:
        host = host.split(':', 1)[0]
    return host.rstrip('.')


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
        return True
    except ValueError:
        return False


def is_localhost_hostname(hostname: str) -> bool:
    hostname = normalize_hostname(hostname)
    return hostname == 'localhost' or hostname.endswith('.localhost')


def is_local_hostname(hostname: str, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG) -> bool:
    hostname = normalize_hostname(hostname)
    return (
        is_localhost_hostname(hostname)
        or hostname == config.local_domain
        or hostname.endswith('.' + config.local_domain)
    )


def is_production_hostname(hostname: str, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG) -> bool:
    hostname = normalize_hostname(hostname)
    return hostname == config.production_domain or hostname.endswith('.' + config.production_domain)


def is_custom_domain(hostname: str, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG) -> bool:
    """True for a well-formed hostname that is neither ours nor local."""
    hostname = normalize_hostname(hostname)
    if not hostname or '.' not in hostname or _is_ip_literal(hostname) or not _HOSTNAME_RE.match(hostname):
        return False
    return not is_local_hostname(hostname, config) and not is_production_hostname(hostname, config)


def extract_subdomain(hostname: str, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG) -> Optional[str]:
    """
    Return the significant subdomain label, or None for apex/foreign hosts.

    The label next to the apex domain wins, so ``www.grace.faith-interactive.com``
    yields ``grace``.
    """
    hostname = normalize_hostname(hostname)
    for domain in ('localhost', config.local_domain, config.production_domain):
        suffix = '.' + domain
        if hostname.endswith(suffix):
            sub = hostname[:-len(suffix)]
            label = sub.rsplit('.', 1)[-1]
            return label or None
    return None


def _classify(hostname: str, domain: str, is_local: bool, original: str,
              config: HostnameConfig) -> ParsedHostname:
    if hostname == domain:
        return ParsedHostname(Surface.MARKETING, None, is_local, original)

    label = hostname[:-len(domain) - 1].rsplit('.', 1)[-1]
    if not label or label == 'www':
        return ParsedHostname(Surface.MARKETING, None, is_local, original)
    if label == config.platform_subdomain:
        return ParsedHostname(Surface.PLATFORM, None, is_local, original)
    if label == config.admin_subdomain:
        return ParsedHostname(Surface.ADMIN, None, is_local, original)
    if not _SLUG_RE.match(label):
        return ParsedHostname(Surface.MARKETING, None, is_local, original)
    return ParsedHostname(Surface.TENANT, label, is_local, original)


def parse_hostname(host, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG) -> ParsedHostname:
    """Resolve a Host header to a surface. Never raises."""
    original = host if isinstance(host, str) else ''
    hostname = normalize_hostname(host)

    if not hostname:
        return ParsedHostname(Surface.MARKETING, None, False, original)

    if _is_ip_literal(hostname):
        return ParsedHostname(Surface.MARKETING, None, ipaddress.ip_address(hostname).is_loopback, original)

    if not _HOSTNAME_RE.match(hostname):
        return ParsedHostname(Surface.MARKETING, None, False, original)

    for domain, is_local in (
        ('localhost', True),
        (config.local_domain, True),
        (config.production_domain, False),
    ):
        if hostname == domain or hostname.endswith('.' + domain):
            return _classify(hostname, domain, is_local, original, config)

    if '.' not in hostname:
        # Single-label intranet names are never church domains
        return ParsedHostname(Surface.MARKETING, None, False, original)

    # Custom domain: the church is looked up by domain, not by slug
    return ParsedHostname(Surface.TENANT, None, False, original)


def build_surface_url(surface, path: str = '/', church_slug: Optional[str] = None,
                      is_local: bool = False, config: HostnameConfig = DEFAULT_HOSTNAME_CONFIG,
                      use_localhost: bool = False) -> str:
    """
    Absolute URL for ``path`` on ``surface``.

    Raises:
        ValueError: tenant surface without a church slug
    """
    surface = Surface(surface)
    if surface is Surface.TENANT and not church_slug:
        raise ValueError("church_slug is required for the tenant surface")

    if not path.startswith('/'):
        path = '/' + path

    if surface is Surface.MARKETING:
        subdomain = None
    elif surface is Surface.PLATFORM:
        subdomain = config.platform_subdomain
    elif surface is Surface.ADMIN:
        subdomain = config.admin_subdomain
    else:
        subdomain = church_slug

    if is_local:
        domain = 'localhost' if use_localhost else config.local_domain
        host = f"{subdomain}.{domain}" if subdomain else domain
        return f"http://{host}:{config.local_port}{path}"

    host = f"{subdomain}.{config.production_domain}" if subdomain else config.production_domain
    return f"https://{host}{path}"


def get_surface_route_prefix(surface) -> str:
    """Internal route prefix each surface is mounted under."""
    return _ROUTE_PREFIXES[Surface(surface)]


def is_reserved_slug(slug) -> bool:
    return bool(slug) and slug.strip().lower() in RESERVED_SLUGS


def is_valid_slug(slug) -> bool:
    """Slug usable as a church subdomain (DNS label, not reserved)."""
    return bool(slug) and bool(_SLUG_RE.match(slug)) and not is_reserved_slug(slug)
