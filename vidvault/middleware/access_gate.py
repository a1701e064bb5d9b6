"""
Access Gate Middleware

Every request passes through decide() before reaching a page or API
handler. The decision depends only on the request path and whether the
caller is authenticated:

    1. authenticated, public page, not home  -> redirect to home
    2. unauthenticated, not public:
         API path  -> 401 JSON error
         page path -> redirect to sign-in
    3. otherwise                             -> allow
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from vidvault.config import Settings, get_settings
from vidvault.security import Identity, resolve_identity

logger = logging.getLogger(__name__)

PathPredicate = Callable[[str], bool]


def normalize_path(path: str) -> str:
    """Drop a trailing slash so "/signin/" and "/signin" match the same rule"""
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path or "/"


def exact_path(*paths: str) -> PathPredicate:
    """Predicate matching any of the given paths exactly"""
    allowed = frozenset(normalize_path(p) for p in paths)
    return lambda path: path in allowed


def path_prefix(*prefixes: str) -> PathPredicate:
    """Predicate matching a prefix on path-segment boundaries"""
    roots = tuple(normalize_path(p) for p in prefixes)

    def matches(path: str) -> bool:
        return any(path == root or path.startswith(root.rstrip("/") + "/") for root in roots)

    return matches


class GateAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    location: Optional[str] = None
    status_code: Optional[int] = None
    body: Optional[dict] = None

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(GateAction.ALLOW)

    @classmethod
    def redirect(cls, location: str) -> "GateDecision":
        return cls(GateAction.REDIRECT, location=location)

    @classmethod
    def deny(cls, status_code: int = status.HTTP_401_UNAUTHORIZED, error: str = "Unauthorized") -> "GateDecision":
        return cls(GateAction.DENY, status_code=status_code, body={"error": error})


@dataclass(frozen=True)
class AccessRules:
    """Path predicates the gate evaluates, in the order decide() applies them"""
    is_public_page: PathPredicate
    is_public_api: PathPredicate
    is_home: PathPredicate
    is_api: PathPredicate
    is_exempt: PathPredicate = field(default=lambda path: False)
    home_path: str = "/home"
    signin_path: str = "/signin"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AccessRules":
        settings = settings or get_settings()
        return cls.build(
            public_pages=settings.public_page_paths,
            public_apis=settings.public_api_paths,
            home_path=settings.home_path,
            signin_path=settings.signin_path,
            api_prefix=settings.api_prefix,
            exempt_prefixes=settings.gate_exempt_prefixes,
        )

    @classmethod
    def build(
        cls,
        public_pages: Iterable[str],
        public_apis: Iterable[str],
        home_path: str = "/home",
        signin_path: str = "/signin",
        api_prefix: str = "/api",
        exempt_prefixes: Iterable[str] = (),
    ) -> "AccessRules":
        exempt = tuple(exempt_prefixes)
        return cls(
            is_public_page=exact_path(*public_pages),
            is_public_api=exact_path(*public_apis),
            is_home=exact_path(home_path),
            is_api=path_prefix(api_prefix),
            is_exempt=path_prefix(*exempt) if exempt else (lambda path: False),
            home_path=home_path,
            signin_path=signin_path,
        )


def decide(path: str, authenticated: bool, rules: AccessRules) -> GateDecision:
    """
    Decide what happens to a request

    Args:
        path: Request path (no query string)
        authenticated: Whether the identity collaborator verified the caller
        rules: Allow-lists and special paths

    Returns:
        GateDecision to allow, redirect or deny

    Examples:
        >>> rules = AccessRules.build(["/signin", "/home"], ["/api/videos"])
        >>> decide("/signin", True, rules).location
        '/home'
        >>> decide("/api/private", False, rules).status_code
        401
    """
    path = normalize_path(path)

    if rules.is_exempt(path):
        return GateDecision.allow()

    if authenticated:
        if rules.is_public_page(path) and not rules.is_home(path):
            return GateDecision.redirect(rules.home_path)
        return GateDecision.allow()

    if rules.is_public_page(path) or rules.is_public_api(path):
        return GateDecision.allow()

    if rules.is_api(path):
        return GateDecision.deny()

    return GateDecision.redirect(rules.signin_path)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Applies decide() to every request and stores the identity on request.state"""

    def __init__(
        self,
        app,
        rules: Optional[AccessRules] = None,
        identity_resolver: Callable[[Request], Optional[Identity]] = resolve_identity,
    ):
        super().__init__(app)
        self.rules = rules or AccessRules.from_settings()
        self.identity_resolver = identity_resolver

    async def dispatch(self, request: Request, call_next):
        identity = self.identity_resolver(request)
        request.state.identity = identity

        decision = decide(request.url.path, identity is not None, self.rules)

        if decision.action == GateAction.REDIRECT:
            logger.debug(f"Redirecting {request.url.path} -> {decision.location}")
            target = request.url.replace(path=decision.location, query="", fragment="")
            return RedirectResponse(str(target), status_code=status.HTTP_307_TEMPORARY_REDIRECT)

        if decision.action == GateAction.DENY:
            logger.debug(f"Denied unauthenticated request to {request.url.path}")
            return JSONResponse(status_code=decision.status_code, content=decision.body)

        return await call_next(request)
