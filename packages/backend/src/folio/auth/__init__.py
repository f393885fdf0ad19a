"""Authentication and authorization.

Learn: One authentication path: email/password → signed JWT.
The token carries {id, email, role}; admin routes additionally
require role == "admin". There is no refresh token and no
revocation list: a token is valid until it expires (or forever
when JWT_EXPIRES_IN=never).
"""
