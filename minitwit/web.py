import logging
from datetime import datetime, timezone
from hashlib import md5
from wsgiref.simple_server import make_server

from pyramid.config import Configurator
from pyramid.view import exception_view_config, view_config
from pyramid.httpexceptions import HTTPFound
from pyramid.session import SignedCookieSessionFactory

from minitwit.auth import AuthService
from minitwit.config import Settings
from minitwit.db import Store
from minitwit.errors import (HashingError, InvalidCredentials, NotFound,
                             StorageError, Unauthorized, ValidationError)
from minitwit.feed import FeedAggregator
from minitwit.graph import SocialGraphManager
from minitwit.hashing import PasswordHasher
from minitwit.logging_utils import configure_logging
from minitwit.sessions import SessionIdentity

logger = logging.getLogger(__name__)


class Services:
    """The components a request works with, wired to one store."""

    def __init__(self, store, hasher):
        self.store = store
        self.hasher = hasher
        self.identity = SessionIdentity()
        self.graph = SocialGraphManager(store)
        self.feed = FeedAggregator(store, self.graph)
        self.auth = AuthService(store, hasher)


def build_services(settings):
    return Services(Store(settings.database_url),
                    PasswordHasher(method=settings.hash_method))


def format_datetime(timestamp):
    """Format a timestamp for display."""
    return datetime.fromtimestamp(timestamp, timezone.utc).strftime('%Y-%m-%d @ %H:%M')

def gravatar_url(email, size=80):
    """Return the gravatar image for the given email address."""
    return 'https://www.gravatar.com/avatar/%s?d=identicon&s=%d' % \
        (md5(email.strip().lower().encode('utf-8')).hexdigest(), size)

def _entry(entry):
    return {
        'message_id': entry.message_id,
        'author_id': entry.author_id,
        'username': entry.username,
        'text': entry.text,
        'pub_date': entry.pub_date,
        'pub_date_display': format_datetime(entry.pub_date),
        'gravatar': gravatar_url(entry.email, 48),
    }

def _context(request, **values):
    """Adds the logged-in user and pending flashes to a view's result."""
    principal = request.principal
    values['user'] = ({'user_id': principal.user_id, 'username': principal.username}
                      if principal.is_authenticated else None)
    values['flashes'] = request.session.pop_flash()
    return values

def _principal(request):
    return request.services.identity.resolve(request.session)

@view_config(route_name='timeline', renderer='json')
def timeline(request):
    """Shows a users timeline or redirects to public."""
    if not request.principal.is_authenticated:
        return HTTPFound(location=request.route_url('public_timeline'))
    messages = request.services.feed.own_timeline(request.principal)
    return _context(request, messages=[_entry(m) for m in messages])

@view_config(route_name='public_timeline', renderer='json')
def public_timeline(request):
    """Displays the latest messages of all users."""
    messages = request.services.feed.public_timeline()
    return _context(request, messages=[_entry(m) for m in messages])

@view_config(route_name='user_timeline', renderer='json')
def user_timeline(request):
    """Displays a user's tweets."""
    username = request.matchdict['username']
    services = request.services
    profile_user = services.store.get_user_by_username(username)
    if profile_user is None:
        raise NotFound(username)

    followed = False
    if request.principal.is_authenticated:
        followed = services.graph.is_following(
            request.principal.user_id, profile_user.user_id)

    messages = services.feed.user_timeline(username)
    return _context(
        request,
        messages=[_entry(m) for m in messages],
        followed=followed,
        profile_user={'user_id': profile_user.user_id,
                      'username': profile_user.username,
                      'gravatar': gravatar_url(profile_user.email)})

@view_config(route_name='follow_user')
def follow_user(request):
    """Adds the current user as follower of the given user."""
    if not request.principal.is_authenticated:
        raise Unauthorized('follow requires a login')
    username = request.matchdict['username']
    request.services.graph.follow(request.principal.user_id, username)
    request.session.flash('You are now following "%s"' % username)
    return HTTPFound(location=request.route_url('user_timeline', username=username))

@view_config(route_name='unfollow_user')
def unfollow_user(request):
    """Removes the current user as follower of the given user."""
    if not request.principal.is_authenticated:
        raise Unauthorized('unfollow requires a login')
    username = request.matchdict['username']
    request.services.graph.unfollow(request.principal.user_id, username)
    request.session.flash('You are no longer following "%s"' % username)
    return HTTPFound(location=request.route_url('user_timeline', username=username))

@view_config(route_name='add_message', request_method='POST')
def add_message(request):
    """Registers a new message for the user."""
    if not request.principal.is_authenticated:
        raise Unauthorized('posting requires a login')
    text = request.POST.get('text')
    if text:
        request.services.store.add_message(request.principal.user_id, text)
        request.session.flash('Your message was recorded')
    return HTTPFound(location=request.route_url('timeline'))

@view_config(route_name='login', renderer='json')
def login(request):
    """Logs the user in."""
    if request.principal.is_authenticated:
        return HTTPFound(location=request.route_url('timeline'))

    error = None
    if request.method == 'POST':
        try:
            principal = request.services.auth.login(
                request.POST.get('username'), request.POST.get('password'))
        except InvalidCredentials as exc:
            error = exc.reason
        else:
            request.services.identity.establish(
                request.session, principal.user_id, principal.username)
            request.session.flash('You were logged in')
            return HTTPFound(location=request.route_url('timeline'))

    return _context(request, error=error)

@view_config(route_name='register', renderer='json')
def register(request):
    """Registers the user."""
    if request.principal.is_authenticated:
        return HTTPFound(location=request.route_url('timeline'))

    error = None
    if request.method == 'POST':
        try:
            request.services.auth.register(
                request.POST.get('username'), request.POST.get('email'),
                request.POST.get('password'), request.POST.get('password2'))
        except ValidationError as exc:
            error = exc.reason
        else:
            request.session.flash('You were successfully registered and can login now')
            return HTTPFound(location=request.route_url('login'))

    return _context(request, error=error)

@view_config(route_name='logout')
def logout(request):
    """Logs the user out"""
    request.services.identity.clear(request.session)
    request.session.flash('You were logged out')
    return HTTPFound(location=request.route_url('public_timeline'))

def _error(request, status, message):
    request.response.status_int = status
    return {'status': status, 'error_msg': message}

@exception_view_config(NotFound, renderer='json')
def not_found(exc, request):
    return _error(request, 404, 'Unknown user "%s"' % exc)

@exception_view_config(Unauthorized, renderer='json')
def unauthorized(exc, request):
    return _error(request, 401, 'You have to be logged in')

@exception_view_config(StorageError, renderer='json')
@exception_view_config(HashingError, renderer='json')
def server_error(exc, request):
    logger.error('%s on %s: %s', type(exc).__name__, request.path, exc)
    return _error(request, 500, 'Internal server error')

def make_app(settings=None, services=None):
    """Builds the WSGI application."""
    settings = settings or Settings.from_env()
    services = services or build_services(settings)

    with Configurator() as config:
        config.set_session_factory(SignedCookieSessionFactory(settings.secret_key))
        config.add_request_method(lambda request: services, 'services', reify=True)
        config.add_request_method(_principal, 'principal', reify=True)

        config.add_route('timeline', '/')
        config.add_route('public_timeline', '/public')
        config.add_route('login', '/login')
        config.add_route('register', '/register')
        config.add_route('logout', '/logout')
        config.add_route('add_message', '/add_message')
        config.add_route('follow_user', '/{username}/follow')
        config.add_route('unfollow_user', '/{username}/unfollow')
        config.add_route('user_timeline', '/{username}')
        config.scan('minitwit.web')

        return config.make_wsgi_app()


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    services = build_services(settings)
    services.store.init_db()
    app = make_app(settings, services)
    logger.info('Running on http://%s:%d', settings.host, settings.port)
    make_server(settings.host, settings.port, app).serve_forever()


if __name__ == '__main__':
    main()
