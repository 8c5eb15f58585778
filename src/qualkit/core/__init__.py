"""Core domain logic package.

This package contains the coding domain model and the application session.
Modules here must not import GUI frameworks and perform no I/O except through
the collaborators defined in ``ports``.
"""
