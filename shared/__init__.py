"""Code shared by the marina apps: value objects and test builders."""
