'''
Bring one service principal name to a desired state.

    Present   the SPN is held by exactly one account, the one named
    Absent    no account holds the SPN

Every operation reads the directory again before deciding anything; a
CurrentState returned by describe() is never reused by converge().
'''

import enum
import logging
import collections

from config import ACCOUNT_DELIMITER
from ad.errors import InvalidInput, TargetAccountNotFound

logger = logging.getLogger(__name__)


class Presence(enum.Enum):
    PRESENT = 'Present'
    ABSENT = 'Absent'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        for p in cls:
            if p.value.lower() == str(value).strip().lower():
                return p
        raise InvalidInput('Ensure must be Present or Absent, not {!r}'.format(value))


class BindingState(enum.Enum):
    UNBOUND = 'Unbound'
    BOUND = 'Bound'
    # more than one account holds the SPN. never a valid desired state
    CONFLICT = 'Conflict'


Binding = collections.namedtuple('Binding', ['spn', 'account', 'handle'])

Mutation = collections.namedtuple('Mutation', ['action', 'spn', 'account', 'handle'])
ATTACH = 'attach'
DETACH = 'detach'


def same_account(a, b):
    # sAMAccountName matching in AD is case insensitive
    return a.casefold() == b.casefold()

def check_spn(spn):
    if spn is None or not str(spn).strip():
        raise InvalidInput('ServicePrincipalName is required')
    return str(spn).strip()


class DesiredState(collections.namedtuple('DesiredState', ['presence', 'spn', 'account'])):
    ''' presence, SPN and (for Present) the sAMAccountName that should hold it '''

    def __new__(cls, presence, spn, account=''):
        return super().__new__(cls, Presence.parse(presence), spn, account or '')

    def validate(self):
        check_spn(self.spn)
        if self.presence is Presence.PRESENT and not self.account.strip():
            raise InvalidInput('Account is required when Ensure is Present: {}'.format(self.spn))
        return self


class CurrentState(collections.namedtuple('CurrentState', ['presence', 'spn', 'accounts', 'handles'])):

    @property
    def account(self):
        ''' holders joined into one string, in the order the directory returned them '''
        return ACCOUNT_DELIMITER.join(self.accounts)

    @property
    def state(self):
        if len(self.accounts) == 0:
            return BindingState.UNBOUND
        if len(self.accounts) == 1:
            return BindingState.BOUND
        return BindingState.CONFLICT

    def satisfies(self, desired):
        if self.presence is not desired.presence:
            return False
        if desired.presence is Presence.ABSENT:
            return True
        return self.state is BindingState.BOUND and same_account(self.accounts[0], desired.account)


class StateReader:
    ''' read-only view of which accounts hold an SPN '''

    def __init__(self, directory):
        self.directory = directory

    def read(self, spn):
        spn = check_spn(spn)
        bindings = tuple(Binding(spn, account, handle)
                         for account, handle in self.directory.query_objects_by_spn(spn))
        logger.debug('{} held by {} account(s): {}'.format(
            spn, len(bindings), ', '.join(b.account for b in bindings)))
        return bindings


class Reconciler:

    def __init__(self, directory, reader=None):
        self.directory = directory
        self.reader = reader or StateReader(directory)

    def describe(self, spn):
        bindings = self.reader.read(spn)
        presence = Presence.PRESENT if bindings else Presence.ABSENT
        return CurrentState(presence, check_spn(spn),
                            tuple(b.account for b in bindings),
                            tuple(b.handle for b in bindings))

    def is_satisfied(self, desired):
        desired = desired.validate()
        current = self.describe(desired.spn)
        ok = current.satisfies(desired)
        logger.info('{} is {} on [{}], want {} on [{}]: {}'.format(
            current.spn, current.presence.value, current.account,
            desired.presence.value, desired.account, 'in desired state' if ok else 'not in desired state'))
        return ok

    def plan(self, desired):
        ''' return the mutations that would bring the directory to the desired state.
        raises InvalidInput or TargetAccountNotFound before reading any binding '''
        desired = desired.validate()
        spn = check_spn(desired.spn)

        target = None
        if desired.presence is Presence.PRESENT:
            target = self.directory.query_object_by_sam_account_name(desired.account)
            if target is None:
                logger.error('Account not found: '+desired.account)
                raise TargetAccountNotFound('Account not found: {}'.format(desired.account))

        bindings = self.reader.read(spn)
        if desired.presence is Presence.ABSENT:
            return [Mutation(DETACH, spn, b.account, b.handle) for b in bindings]

        mutations = [Mutation(DETACH, spn, b.account, b.handle)
                     for b in bindings if not same_account(b.account, desired.account)]
        if not any(same_account(b.account, desired.account) for b in bindings):
            mutations.append(Mutation(ATTACH, spn, desired.account, target))
        return mutations

    def apply(self, mutations):
        for m in mutations:
            if m.action == DETACH:
                logger.info('DETACH {} from {} ({})'.format(m.spn, m.account, m.handle))
                self.directory.remove_spn(m.handle, m.spn)
            else:
                logger.info('ATTACH {} to {} ({})'.format(m.spn, m.account, m.handle))
                self.directory.add_spn(m.handle, m.spn)
        return mutations

    def converge(self, desired):
        ''' detach the SPN from every wrong holder and attach it to the right one.
        stops at the first fault; mutations already made are not undone '''
        return self.apply(self.plan(desired))

    def ensure(self, desired, dry_run=False):
        ''' converge only if the directory is not already in the desired state '''
        if self.is_satisfied(desired):
            return []
        if dry_run:
            mutations = self.plan(desired)
            for m in mutations:
                logger.info('WHATIF {} {} {} ({})'.format(m.action.upper(), m.spn, m.account, m.handle))
            return mutations
        return self.converge(desired)
