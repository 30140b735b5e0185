#!/usr/bin/env python3
import os
import sys
import socket
import logging
import argparse

# non-std
import socks
import dns.query
from ldap3.core.exceptions import LDAPException

# local modules
import plugins

import net.name
import net.util
import ad.dc
import ad.connection
from ad.errors import SpnError
from config import TIMEOUT

DESCRIPTION = 'Keep an ActiveDirectory servicePrincipalName bound to exactly one account'

EXAMPLES = '''
examples:
    spnctl -u CONTOSO\\admin get HOST/LON-DC1
    spnctl -u CONTOSO\\admin test HOST/LON-DC1 -a LON-DC1$
    spnctl -u CONTOSO\\admin set HOST/LON-DC1 -a LON-DC1$
    spnctl -u CONTOSO\\admin set HOST/LON-DC1 --ensure absent --dry-run
'''

LOGGERS = ['spnctl', 'plugins', 'ad', 'net']

logger = logging.getLogger('spnctl')


def get_arg_parser():
    parser = argparse.ArgumentParser(description=DESCRIPTION, epilog=EXAMPLES,
                                     formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument('-u', '--username', required=True, help='may specify DOMAIN\\USER')
    parser.add_argument('-p', '--password', help='password. prompted for if not given')
    parser.add_argument('--nthash', action='store_true', help='password is an NTLM hash')
    parser.add_argument('--proxy', help='socks5 proxy: eg 127.0.0.1:8888')
    parser.add_argument('-s', '--server', help='domain controller address or name')
    parser.add_argument('-d', '--domain', help='user domain. may be different than domain of --server (trusts)')
    parser.add_argument('-b', '--search-base', dest='search_base', help='default is the defaultNamingContext of the DC')
    parser.add_argument('--timeout', type=int, default=TIMEOUT, help='timeout for network operations')
    parser.add_argument('--port', type=int, help='default 389 or 636 with --tls')
    parser.add_argument('--verbose', action='store_true')
    parser.add_argument('--debug', action='store_true', help='implies --verbose')
    parser.add_argument('--name-server', dest='name_server', help='specify name server for domain')
    parser.add_argument('--dn', action='store_true', help='show distinguished names of AD objects')
    parser.add_argument('--insecure', action='store_true', help='ignore invalid tls certs and allow public servers')

    tls_group = parser.add_mutually_exclusive_group()
    tls_group.add_argument('--tls', action='store_true', help='initiate connection with TLS')
    tls_group.add_argument('--start-tls', dest='starttls', action='store_true',  help='use START_TLS')

    subparsers = parser.add_subparsers(dest='command', metavar='command', required=True, help='choose an action')
    plugins.load_plugins(subparsers)
    return parser


def setup_logging(args):
    h = logging.StreamHandler()
    if args.debug:
        level = logging.DEBUG
        h.setFormatter(logging.Formatter('[%(levelname)s] %(filename)s:%(lineno)s %(message)s'))
    else:
        level = logging.INFO if args.verbose else logging.WARNING
        h.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
    for n in LOGGERS:
        l = logging.getLogger(n)
        l.setLevel(level)
        l.addHandler(h)


def set_proxy(proxy):
    proxy_host, proxy_port = proxy.split(':')
    logger.debug('Setting SOCKS5 proxy: {}:{}'.format(proxy_host, int(proxy_port)))
    socks.set_default_proxy(socks.SOCKS5, proxy_host, int(proxy_port), True)
    socket.socket = socks.socksocket
    dns.query.socket_factory = socks.socksocket


def get_resolv_conf_domain(path='/etc/resolv.conf'):
    if not os.path.exists(path):
        return None
    with open(path) as f:
        for line in [l.strip() for l in f]:
            if line.startswith('domain ') or line.startswith('search '):
                return line.split()[1]
    return None


def resolve_target(args):
    ''' fill in domain, server, port and search base. exits if any cannot be found '''
    if args.username.find('\\') != -1:
        if args.domain:
            args.username = args.username.split('\\')[-1]
        else:
            args.domain, args.username = args.username.split('\\', 1)

    if not args.port:
        args.port = 636 if args.tls else 389

    if args.server and not net.util.is_addr(args.server):
        # resolve DC hostname
        args.server = net.name.get_addr_by_host(args.server, args.name_server, args.timeout) or \
                      net.name.get_host_by_name(args.server)
        if not args.server:
            logger.error('Failed to resolve DC hostname')
            sys.exit(1)

    if not args.domain or args.domain.count('.') == 0:
        logger.debug('Checking for domain name')
        domain = None
        if args.server:
            logger.debug('Querying LDAP for domain')
            info = ad.dc.get_info(args)
            domain = ad.dc.naming_context_to_domain(info.get('defaultNamingContext', ''))
        else:
            domain = get_resolv_conf_domain()
            if domain:
                logger.debug('Found domain in resolv.conf: '+domain)
        if not domain:
            logger.error('Failed to get domain. Try supplying one with -d, --domain.')
            sys.exit(1)
        # keep the NetBIOS name for the bind if one was given
        args.domain = args.domain or domain
        args.server_domain = domain
        logger.info('Found domain: '+domain)
    else:
        args.server_domain = args.domain

    if not args.server:
        # attempt to find a DC
        logger.info('Looking for domain controller for '+args.server_domain)
        servers = ad.dc.get_domain_controllers_by_dns(args.server_domain, args.name_server, args.timeout)
        if not servers:
            logger.error('Failed to find a domain controller')
            sys.exit(1)
        args.server = servers[0]['address']
        logger.info('Found a domain controller for {} at {}'.format(args.server_domain, args.server))

    if not args.search_base:
        args.search_base = ad.dc.domain_to_search_base(args.server_domain)

    logger.debug('DC         {}'.format(args.server))
    logger.debug('Port       '+str(args.port))
    logger.debug('Username   {}\\{}'.format(args.domain, args.username))
    logger.debug('SearchBase '+args.search_base)
    logger.debug('NameServer '+ (args.name_server or 'default'))
    if not net.util.is_private_addr(args.server) and not args.insecure:
        logger.error('Aborting due to public LDAP server. use --insecure to override')
        sys.exit(1)


def main(argv=None):
    parser = get_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args)
    socket.setdefaulttimeout(args.timeout)

    # only sub-commands which modify the directory get a writable connection
    args.write = getattr(args, 'write', False) and not getattr(args, 'dry_run', False)
    if args.proxy:
        set_proxy(args.proxy)

    try:
        resolve_target(args)
        conn = ad.connection.get(args)
    except LDAPException as e:
        logger.error('Failed to connect to {}: {}'.format(args.server, e))
        sys.exit(1)

    if not conn.bound:
        logger.error('failed to bind')
        sys.exit(1)

    try:
        rc = args.handler(args, conn)
    except SpnError as e:
        logger.error(str(e))
        rc = 1
    finally:
        conn.unbind()
        logger.debug('ldap queries  {}'.format(conn.query_count))
        logger.debug('ldap modifies {}'.format(conn.modify_count))
    sys.exit(rc or 0)


if __name__ == '__main__':
    main()
