"""
NSX Policy API operations.

Each operation is a thin async function over NSXClient. Operations share
nothing but the client.
"""
