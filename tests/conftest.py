import collections

import ldap3
import pytest

from ad.connection import Connection
from ad.errors import DirectoryUnavailable

SEARCH_BASE = 'DC=contoso,DC=com'
ADMIN_DN = 'CN=admin,CN=Users,DC=contoso,DC=com'
ADMIN_PASSWORD = 'Passw0rd!'


class FakeDirectory:
    ''' in-memory stand-in for ad.spn.SpnDirectory which records every call '''

    def __init__(self):
        self.objects = collections.OrderedDict()
        self.calls = []
        self.fail_on = None

    def add_account(self, sam, spns=()):
        dn = 'CN={},OU=Servers,{}'.format(sam.rstrip('$'), SEARCH_BASE)
        self.objects[dn] = {'sam': sam, 'spns': list(spns)}
        return dn

    def holders(self, spn):
        return [o['sam'] for o in self.objects.values() if spn in o['spns']]

    @property
    def mutations(self):
        return [c for c in self.calls if c[0] in ('attach', 'detach')]

    def query_objects_by_spn(self, spn):
        self.calls.append(('query', spn))
        return [(o['sam'], dn) for dn, o in self.objects.items() if spn in o['spns']]

    def query_object_by_sam_account_name(self, name):
        self.calls.append(('lookup', name))
        for dn, o in self.objects.items():
            if o['sam'].lower() == name.lower():
                return dn
        return None

    def add_spn(self, handle, spn):
        self.calls.append(('attach', handle, spn))
        self._fault('attach', handle)
        if spn not in self.objects[handle]['spns']:
            self.objects[handle]['spns'].append(spn)

    def remove_spn(self, handle, spn):
        self.calls.append(('detach', handle, spn))
        self._fault('detach', handle)
        if spn in self.objects[handle]['spns']:
            self.objects[handle]['spns'].remove(spn)

    def _fault(self, action, handle):
        if self.fail_on == (action, handle):
            raise DirectoryUnavailable('{} {} failed: unwillingToPerform'.format(action, handle))


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def ldap_conn():
    ''' ad.connection.Connection over ldap3's in-memory mock strategy '''
    server = ldap3.Server('lon-dc1.contoso.com')
    conn = Connection(server, user=ADMIN_DN, password=ADMIN_PASSWORD, client_strategy=ldap3.MOCK_SYNC,
                      page_size=0, search_base=SEARCH_BASE)
    conn.strategy.add_entry(SEARCH_BASE, {'objectClass': ['top', 'domain'], 'dc': 'contoso'})
    conn.strategy.add_entry(ADMIN_DN, {'objectClass': ['top', 'person', 'user'],
                                       'sAMAccountName': 'admin', 'userPassword': ADMIN_PASSWORD})
    conn.strategy.add_entry('CN=LON-DC1,OU=Domain Controllers,DC=contoso,DC=com', {
        'objectClass': ['top', 'person', 'user', 'computer'],
        'sAMAccountName': 'LON-DC1$',
        'servicePrincipalName': ['ldap/lon-dc1.contoso.com', 'HOST/lon-dc1.contoso.com'],
    })
    conn.strategy.add_entry('CN=LON-DC2,OU=Domain Controllers,DC=contoso,DC=com', {
        'objectClass': ['top', 'person', 'user', 'computer'],
        'sAMAccountName': 'LON-DC2$',
        'servicePrincipalName': ['HOST/LON-DC1', 'HOST/lon-dc2.contoso.com'],
    })
    conn.strategy.add_entry('CN=svc-sql,OU=Service Accounts,DC=contoso,DC=com', {
        'objectClass': ['top', 'person', 'user'],
        'sAMAccountName': 'svc-sql',
    })
    conn.bind()
    yield conn
    conn.unbind()
