def add_security_headers(response):
    """Add security headers to response"""
    # Content Security Policy: the API serves JSON only
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

    # Other security headers
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'same-origin'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=(), camera=()'

    # Sheet data changes underneath us, never cache it
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'

    return response


def add_hsts_header(response):
    response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


def init_security(app):
    """Initialize security features for the Flask app"""
    app.after_request(add_security_headers)

    # HSTS only when the app is served over https
    if app.config.get('PREFERRED_URL_SCHEME') == 'https':
        app.after_request(add_hsts_header)
