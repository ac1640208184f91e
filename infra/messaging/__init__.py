from .email_outbound import EmailOutbound, compose_body

__all__ = ["EmailOutbound", "compose_body"]
