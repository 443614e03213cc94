"""Timeline composition: public, own and profile feeds."""
from minitwit.errors import Unauthorized

PER_PAGE = 30


class FeedAggregator:
    """Selects the visible messages for a viewer, newest first.

    Every feed is capped at ``PER_PAGE`` entries and excludes flagged
    messages. Entries carry author metadata so renderers need no second
    lookup.
    """

    def __init__(self, store, graph):
        self.store = store
        self.graph = graph

    def public_timeline(self):
        """Displays the latest messages of all users."""
        return self.store.messages(PER_PAGE)

    def own_timeline(self, principal):
        """The viewer's messages merged with everyone they follow."""
        if not principal.is_authenticated:
            raise Unauthorized('own timeline requires a login')
        author_ids = [principal.user_id]
        author_ids.extend(self.graph.followed_ids(principal.user_id))
        return self.store.messages(PER_PAGE, author_ids=author_ids)

    def user_timeline(self, username):
        """Messages posted by ``username``; unknown users yield no rows."""
        user_id = self.store.get_user_id(username)
        if user_id is None:
            return []
        return self.store.messages(PER_PAGE, author_ids=[user_id])
