'''
a service principal name indicates a service run by an AD account. kerberos
clients use it to find the account to encrypt service tickets for, so one SPN
should be held by one account only.

SpnDirectory is the only place the servicePrincipalName attribute is read or
written over ldap.
'''

import ldap3
import logging
from ldap3.core.exceptions import LDAPException

from config import SPN_ATTRIBUTE
from ad.errors import DirectoryUnavailable
from ad.convert import escape, get_attr, get_attrs, dn_to_cn

logger = logging.getLogger(__name__)

# ldap result codes which mean the directory already looks the way a modify wants it
RESULT_NO_SUCH_ATTRIBUTE = 16
RESULT_ATTRIBUTE_OR_VALUE_EXISTS = 20


class SpnDirectory:
    ''' query and mutate SPNs through an ad.connection.Connection '''

    def __init__(self, conn, search_base=None):
        self.conn = conn
        self.search_base = search_base or conn.default_search_base

    def _search(self, search_filter, attributes):
        try:
            return self.conn.searchg(self.search_base, search_filter, search_scope=ldap3.SUBTREE,
                                     attributes=attributes)
        except LDAPException as e:
            raise DirectoryUnavailable('Search failed {}: {}'.format(search_filter, e)) from e

    def query_objects_by_spn(self, spn):
        ''' return (samAccountName, dn) for every object holding spn, in the order
        the server returned them '''
        response = self._search('({}={})'.format(SPN_ATTRIBUTE, escape(spn)), ['sAMAccountName'])
        return [(get_attr(r, 'sAMAccountName', dn_to_cn(r['dn'])), r['dn']) for r in response]

    def query_object_by_sam_account_name(self, name):
        ''' return the dn of the account or None if it does not exist '''
        response = self._search('(sAMAccountName={})'.format(escape(name)), ['sAMAccountName'])
        if len(response) == 0:
            return None
        if len(response) > 1:
            logger.warning('Found multiple objects for {} when expecting 1. Using first result only.'.format(name))
        return response[0]['dn']

    def list_spns(self, account=None):
        ''' return (dn, [spn, ...]) for every object with at least one SPN '''
        if account:
            search_filter = '(&(sAMAccountName={})({}=*))'.format(escape(account), SPN_ATTRIBUTE)
        else:
            search_filter = '({}=*)'.format(SPN_ATTRIBUTE)
        response = self._search(search_filter, [SPN_ATTRIBUTE])
        return [(r['dn'], get_attrs(r, SPN_ATTRIBUTE)) for r in response]

    def add_spn(self, handle, spn):
        self._modify(handle, ldap3.MODIFY_ADD, spn, RESULT_ATTRIBUTE_OR_VALUE_EXISTS)

    def remove_spn(self, handle, spn):
        self._modify(handle, ldap3.MODIFY_DELETE, spn, RESULT_NO_SUCH_ATTRIBUTE)

    def _modify(self, handle, operation, spn, already_done):
        try:
            ok = self.conn.modify(handle, {SPN_ATTRIBUTE: [(operation, [spn])]})
        except LDAPException as e:
            raise DirectoryUnavailable('{} {} on {} failed: {}'.format(operation, spn, handle, e)) from e
        if ok:
            return
        result = self.conn.result or {}
        if result.get('result') == already_done:
            logger.debug('{} {} on {}: {}'.format(operation, spn, handle, result.get('description')))
            return
        raise DirectoryUnavailable('{} {} on {} failed: {} {}'.format(
            operation, spn, handle, result.get('description'), result.get('message', '')))
