import logging

import plugins
from ad.spn import SpnDirectory
from ad.reconcile import Reconciler

logger = logging.getLogger(__name__)

PLUGIN_NAME='set'
PLUGIN_INFO='''
Bring an SPN to the desired state. With --ensure present the SPN is removed from
every other account that holds it and added to --account. With --ensure absent it
is removed from every account. Nothing is changed if the SPN is already in the
desired state.
'''
g_parser = None

def get_parser():
    return g_parser

def handler(args, conn):
    desired = plugins.get_desired_state(args)
    mutations = Reconciler(SpnDirectory(conn, args.search_base)).ensure(desired, dry_run=args.dry_run)
    if not mutations:
        print('{} is in the desired state'.format(desired.spn))
        return 0
    for m in mutations:
        print('{}{:8s} {} {}'.format('WhatIf: ' if args.dry_run else '', m.action, m.spn,
                                     m.handle if args.dn else m.account))
    return 0

def get_arg_parser(subparser):
    global g_parser
    g_parser = subparser.add_parser(PLUGIN_NAME, help='add or remove an SPN so it is in the desired state')
    g_parser.set_defaults(handler=handler)
    g_parser.set_defaults(write=True)
    plugins.add_desired_state_args(g_parser)
    g_parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
                          help='show the changes without making them')
    return g_parser
