from ldap3.utils.conv import escape_filter_chars


def dn_to_cn(dn):
    ''' return common name from distinguished name '''
    return dn.split(',')[0].split('=')[-1]

def get_attr(o, attr, default=None, trans=None):
    ''' given a dict object returned by ldap, return the first named attribute or if it
    does not exists, return default '''
    if not o.get('attributes', None):
        return default
    v = o['attributes'].get(attr, None)
    if not v:
        return default
    if type(v) == list:
        if len(v) == 0:
            return default
        v = v[0]
    if trans:
        return trans(v)
    return v

def get_attrs(o, attr):
    ''' like get_attr, but return every value of a multi-valued attribute as a list '''
    v = (o.get('attributes') or {}).get(attr, None)
    if not v:
        return []
    if type(v) != list:
        return [v]
    return list(v)

def escape(s):
    ''' https://msdn.microsoft.com/en-us/library/aa746475(v=vs.85).aspx '''
    return escape_filter_chars(s)
