'''
list every object holding servicePrincipalNames, or just one account's.
handy for spotting an SPN registered twice before running set.
'''

import logging

from ad.spn import SpnDirectory
from ad.convert import dn_to_cn

logger = logging.getLogger(__name__)

PLUGIN_NAME='spn'
g_parser = None

def handler(args, conn):
    s = ''
    for dn, spns in SpnDirectory(conn, args.search_base).list_spns(args.account):
        s += '[{}]\n'.format(dn if args.dn else dn_to_cn(dn))
        for spn in spns:
            s += '    '+spn+'\n'
        s += '\n'
    print(s, end='')
    return 0

def get_parser():
    return g_parser

def get_arg_parser(subparser):
    global g_parser
    g_parser = subparser.add_parser(PLUGIN_NAME, help='list servicePrincipalNames for objects')
    g_parser.set_defaults(handler=handler)
    g_parser.add_argument('-a', '--account', help='only list SPNs held by this samAccountName')
    return g_parser
