"""Ward administration package.

Organized by feature modules (reference data, sacramental meeting programs)
with a thin Flask controller layer over service/repository layers.
"""
