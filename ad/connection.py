import sys
import ssl
import ldap3
import logging
import getpass
from ldap3.core.exceptions import LDAPOperationResult

from config import TIMEOUT, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

# paged results control
PAGED_RESULTS_OID = '1.2.840.113556.1.4.319'


class Connection(ldap3.Connection):
    ''' Subclass of ldap3.Connection which pages through search results and counts
    the searches and modifications it performs. Nothing is cached: every call to
    searchg goes to the server, so callers always see current directory state. '''

    def __init__(self, *args, **kwargs):
        # metrics
        self.query_count = 0
        self.modify_count = 0

        # not valid args for parent
        self.timeout = kwargs.pop('timeout', TIMEOUT)
        self.page_size = kwargs.pop('page_size', MAX_PAGE_SIZE)
        self.default_search_base = kwargs.pop('search_base', None)
        ldap3.Connection.__init__(self, *args, **kwargs)

    def searchg(self, search_base, search_filter, search_scope=ldap3.SUBTREE, **kwargs):
        ''' search and return every entry, following the paged results cookie '''
        if 'attributes' not in kwargs:
            kwargs['attributes'] = []
        kwargs['time_limit'] = self.timeout
        if self.page_size:
            kwargs['paged_size'] = self.page_size
            kwargs['paged_criticality'] = True # fail if paging not supported

        logger.debug('SEARCH ({}) {} {}'.format(search_base, search_filter, search_scope))
        entries = []
        pageno = 0
        while True:
            super().search(search_base, search_filter, search_scope, **kwargs)
            self.query_count += 1

            # a refused or truncated search is not an empty one
            result = self.result or {}
            if result.get('result') != 0:
                logger.debug('RESULT {}'.format(str(result)))
                raise LDAPOperationResult(result=result.get('result'), description=result.get('description'),
                                          dn=result.get('dn'), message=result.get('message'),
                                          response_type=result.get('type'))

            # drop referrals and response metadata
            page = [obj for obj in self.response if obj.get('dn')]
            entries.extend(page)
            logger.debug('Page {}: {} results'.format(pageno, len(page)))

            if 'paged_size' not in kwargs:
                break
            control = (self.result.get('controls') or {}).get(PAGED_RESULTS_OID, {})
            cookie = control.get('value', {}).get('cookie')
            if not cookie:
                # b'' -> last page
                break
            kwargs['paged_cookie'] = cookie
            pageno += 1

        logger.debug('RESULT {} {}'.format(len(entries), str(self.result)))
        return entries

    def modify(self, dn, changes, controls=None):
        self.modify_count += 1
        logger.debug('MODIFY ({}) {}'.format(dn, changes))
        return super().modify(dn, changes, controls)


def get(args, addr=None, conn_class=Connection):
    ''' open and bind a connection to the domain controller described by args.
    read only unless the chosen sub-command sets args.write '''
    username = args.domain+'\\'+args.username
    if args.password is None:
        args.password = getpass.getpass()
    if args.nthash:
        if len(args.password) != 32:
            logger.error('Error: ntlm hash must be 32 hex chars')
            sys.exit(1)
        # ldap3 takes LM:NTLM hash then discards the LM hash so we fake the LM hash
        password = '00000000000000000000000000000000:'+args.password
    else:
        password = args.password

    tls_config = ldap3.Tls(validate=ssl.CERT_NONE if args.insecure else ssl.CERT_REQUIRED)
    server = ldap3.Server(addr or args.server, use_ssl=args.tls, port=args.port, tls=tls_config,
                          get_info=None, connect_timeout=args.timeout)
    conn = conn_class(server, user=username, password=password, authentication=ldap3.NTLM,
                      read_only=not args.write, auto_range=True, auto_bind=False,
                      receive_timeout=args.timeout, timeout=args.timeout,
                      search_base=args.search_base)
    conn.open()
    if args.starttls:
        conn.start_tls()
    conn.bind()
    return conn
