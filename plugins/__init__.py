import pkgutil
import logging
import importlib

from ad.reconcile import DesiredState, Presence

logger = logging.getLogger(__name__)

def load_plugins(subparser):
    plugins = []
    for _, name, ispkg in pkgutil.iter_modules(__path__):
        if not ispkg:
            m = importlib.import_module(__name__+'.'+name)
            logger.debug('Loaded module: '+m.PLUGIN_NAME)
            m.get_arg_parser(subparser)
            plugins.append(m)
    return plugins

def add_desired_state_args(parser):
    ''' arguments shared by the plugins which compare against a desired state '''
    parser.add_argument('spn', help='servicePrincipalName, eg HOST/LON-DC1')
    parser.add_argument('-e', '--ensure', type=str.lower, default='present', choices=['present', 'absent'],
                        help='whether the SPN should exist. default present')
    parser.add_argument('-a', '--account', default='', help='samAccountName that should hold the SPN, eg LON-DC1$')

def get_desired_state(args):
    return DesiredState(Presence.parse(args.ensure), args.spn, args.account)
