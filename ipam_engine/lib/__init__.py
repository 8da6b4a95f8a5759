"""Address primitives shared by the allocator and pools."""
