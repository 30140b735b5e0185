import logging

import plugins
from ad.spn import SpnDirectory
from ad.reconcile import Reconciler

logger = logging.getLogger(__name__)

PLUGIN_NAME='test'
g_parser = None

def get_parser():
    return g_parser

def handler(args, conn):
    ''' exit status 0 if the SPN is in the desired state, else 1 '''
    ok = Reconciler(SpnDirectory(conn, args.search_base)).is_satisfied(plugins.get_desired_state(args))
    print(ok)
    return 0 if ok else 1

def get_arg_parser(subparser):
    global g_parser
    g_parser = subparser.add_parser(PLUGIN_NAME, help='check whether an SPN is in the desired state')
    g_parser.set_defaults(handler=handler)
    plugins.add_desired_state_args(g_parser)
    return g_parser
