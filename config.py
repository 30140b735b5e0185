# network timeout for dns lookups, ldap connections and searches (seconds)
TIMEOUT = 5

# page size for paged searches. 0 disables paging
MAX_PAGE_SIZE = 1000

SPN_ATTRIBUTE = 'servicePrincipalName'

# separates holders when more than one account holds an SPN
ACCOUNT_DELIMITER = ';'
