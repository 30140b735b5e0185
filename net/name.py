import socket
import logging
import dns.resolver
import dns.exception

from config import TIMEOUT

logger = logging.getLogger(__name__)

def get_resolver(name_server=None, timeout=TIMEOUT):
    resolver = dns.resolver.Resolver()
    if name_server:
        resolver.nameservers = [name_server]
    # otherwise use nameserver configured for the host
    resolver.timeout = timeout
    resolver.lifetime = timeout
    return resolver

def get_host_by_name(host):
    logger.debug('Resolving {} via default'.format(host))
    try:
        return socket.gethostbyname(host)
    except OSError:
        pass
    return None

def get_addrs_by_host(host, name_server=None, timeout=TIMEOUT):
    ''' return list of addresses for the host '''
    resolver = get_resolver(name_server, timeout)
    try:
        answer = resolver.resolve(host)
        logger.debug('Resolved {} to {} via {}'.format(host, ', '.join([a.address for a in answer]),
                                                       name_server or 'default DNS'))
    except dns.exception.DNSException:
        logger.debug('Name resolution failed for {} via {}'.format(host, name_server or 'default'))
        return []
    return [a.address for a in answer]

def get_addr_by_host(host, name_server=None, timeout=TIMEOUT):
    addrs = get_addrs_by_host(host, name_server, timeout)
    return addrs[0] if len(addrs) else None
