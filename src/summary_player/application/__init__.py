"""
Application Layer

Services orchestrating the domain against the ports in ``interfaces``.
"""
