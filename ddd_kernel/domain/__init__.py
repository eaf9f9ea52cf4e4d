"""
Domain layer - Contains the entity, value object, aggregate and event base classes.
This layer is independent of external concerns and contains the event-sourcing core.
"""
