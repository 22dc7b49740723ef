# cashglitch/admin/__init__.py
