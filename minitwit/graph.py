"""Follow-edge mutations and queries."""
import logging

from minitwit.errors import NotFound

logger = logging.getLogger(__name__)


class SocialGraphManager:
    """Owns the follower table.

    Callers reject anonymous principals before calling the mutating
    methods; ``follower_id`` is assumed to name a real user.
    """

    def __init__(self, store):
        self.store = store

    def _resolve(self, username):
        whom_id = self.store.get_user_id(username)
        if whom_id is None:
            raise NotFound(username)
        return whom_id

    def follow(self, follower_id, username):
        """Adds ``follower_id`` as follower of ``username``; repeats are no-ops."""
        whom_id = self._resolve(username)
        if self.store.add_follower(follower_id, whom_id):
            logger.info('User %s now follows %s', follower_id, username)
        return whom_id

    def unfollow(self, follower_id, username):
        """Removes every edge for the pair; removing nothing still succeeds."""
        whom_id = self._resolve(username)
        removed = self.store.delete_followers(follower_id, whom_id)
        logger.info('User %s unfollowed %s (%d edges removed)',
                    follower_id, username, removed)
        return whom_id

    def is_following(self, follower_id, whom_id):
        return self.store.follow_exists(follower_id, whom_id)

    def followed_ids(self, follower_id):
        return self.store.followed_ids(follower_id)
