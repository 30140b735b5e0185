import socket


# networks a domain controller may sit on without --insecure
PRIVATE_NETWORKS = (
    ('127.0.0.0', 8),
    ('10.0.0.0', 8),
    ('172.16.0.0', 12),
    ('192.168.0.0', 16),
)

def _pack(family, a):
    try:
        return socket.inet_pton(family, a)
    except (OSError, TypeError):
        return None

def is_addr4(a):
    return _pack(socket.AF_INET, a) is not None

def is_addr6(a):
    return _pack(socket.AF_INET6, a) is not None

def is_addr(a):
    return is_addr4(a) or is_addr6(a)

def in_network(addr, network, prefix):
    mask = (0xffffffff << (32 - prefix)) & 0xffffffff
    return (addr & mask) == int.from_bytes(socket.inet_aton(network), 'big')

def is_private_addr(addr):
    ''' keep credentials off the internet. IPv6 addresses are not checked '''
    if is_addr6(addr):
        return True
    value = int.from_bytes(socket.inet_aton(addr), 'big')
    return any(in_network(value, network, prefix) for network, prefix in PRIVATE_NETWORKS)
