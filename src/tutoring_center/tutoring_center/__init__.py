"""Tutoring Center package.

Feature modules (students, courses, finance, attendance, ...) sit on top of a
schema-less document store, with a thin Flask controller layer and
service/repository layers in between.
"""
