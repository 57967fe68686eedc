"""Newsletter notification delivery.

Renders one email per announcement and fans it out to every active
subscriber through the Resend API, either from an admin request or in
the background after academic content is published.
"""
