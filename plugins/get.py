import logging

from ad.spn import SpnDirectory
from ad.reconcile import Reconciler

logger = logging.getLogger(__name__)

PLUGIN_NAME='get'
g_parser = None

def get_parser():
    return g_parser

def handler(args, conn):
    current = Reconciler(SpnDirectory(conn, args.search_base)).describe(args.spn)
    print('ServicePrincipalName     ', current.spn)
    print('Ensure                   ', current.presence.value)
    print('Account                  ', current.account)
    print('State                    ', current.state.value)
    if args.dn:
        for dn in current.handles:
            print('DistinguishedName        ', dn)
    return 0

def get_arg_parser(subparser):
    global g_parser
    g_parser = subparser.add_parser(PLUGIN_NAME, help='show which accounts hold an SPN')
    g_parser.set_defaults(handler=handler)
    g_parser.add_argument('spn', help='servicePrincipalName, eg HOST/LON-DC1')
    return g_parser
