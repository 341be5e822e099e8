"""auth/ -- Identity and authorization package for Character Vault.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or characters/.
api/ and characters/ import from auth/, not the other way around.
"""
