import ldap3
import logging
import dns.exception

from net.util import is_addr
from net.name import get_resolver, get_addr_by_host, get_host_by_name
from config import TIMEOUT

logger = logging.getLogger(__name__)

def get_info(args, conn=None):
    ''' read the rootDSE. AD allows this without binding '''
    if not conn:
        server = ldap3.Server(args.server, args.port, use_ssl=args.tls, connect_timeout=args.timeout)
        conn = ldap3.Connection(server, auto_bind=True, receive_timeout=args.timeout)
    conn.search(
        '',
        '(objectClass=*)',
        search_scope=ldap3.BASE,
        dereference_aliases=ldap3.DEREF_NEVER,
        attributes=[
            'dnsHostName',
            'supportedLDAPVersion',
            'rootDomainNamingContext',
            'defaultNamingContext',
        ]
    )
    r = conn.response[0]['raw_attributes']
    for a in r:
        if a == 'supportedLDAPVersion':
            r[a] = list(sorted(map(int, r[a])))
        elif type(r[a][0]) == bytes:
            r[a] = r[a][0].decode()
        else:
            r[a] = r[a][0]
    return r

def naming_context_to_domain(nc):
    ''' DC=contoso,DC=com -> contoso.com '''
    return '.'.join(p.split('=', 1)[-1] for p in nc.split(',') if p.strip().lower().startswith('dc=')).lower()

def domain_to_search_base(domain):
    return 'dc='+domain.replace('.', ',dc=')

def get_domain_controllers_by_dns(domain, name_server=None, timeout=TIMEOUT):
    ''' return the domain controller addresses for a given domain '''
    resolver = get_resolver(name_server, timeout)
    queries = [
        ('_ldap._tcp.dc._msdcs.'+domain, 'SRV'), # joining domain
        ('_ldap._tcp.'+domain, 'SRV'),
        (domain, 'A'),
        (domain, 'AAAA'),
    ]
    answer = None
    for q in queries:
        try:
            logger.debug('Resolving {} via {}'.format(q[0], name_server or 'default'))
            answer = resolver.resolve(q[0], q[1])
            logger.debug('Answer '+str(answer[0]).split()[-1])
            break
        except dns.exception.DNSException:
            logger.debug('Failed to resolve {} via {}'.format(q[0], name_server or 'default'))
    if not answer:
        # last, try using the default name lookup for your host (may include hosts file)
        addr = get_host_by_name(domain)
        if addr:
            answer = [addr]
        else:
            answer = []
    servers = []
    for a in answer:
        hostname = str(a).split()[-1].rstrip('.')
        addr = hostname if is_addr(hostname) else get_addr_by_host(hostname, name_server, timeout)
        if addr:
            servers.append({'address':addr, 'hostname':hostname})
    return servers
