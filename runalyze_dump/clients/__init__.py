from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.cookie_jar import PersistentCookieJar
from runalyze_dump.clients.runalyze import RunalyzeClient

__all__ = ['BaseClient', 'PersistentCookieJar', 'RunalyzeClient']
