class SpnError(Exception):
    ''' base class for everything raised while reconciling an SPN '''


class InvalidInput(SpnError, ValueError):
    ''' empty SPN, or Ensure=Present without an account '''


class TargetAccountNotFound(SpnError, LookupError):
    ''' the account that should hold the SPN does not exist '''


class DirectoryUnavailable(SpnError):
    ''' a search or modify could not be completed '''
