"""Ignition user-data generation.

Import from the submodules (``factory``, ``backends``, ``node``, ``types``,
``validate``, ``units``); ``bootstrap_s3.core.config`` loads ``templates``
while this package initializes, so nothing is re-exported here.
"""
