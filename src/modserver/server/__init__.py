"""ASGI request pipeline and the pounce listener wrapper."""
