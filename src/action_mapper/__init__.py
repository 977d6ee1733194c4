"""
Action mapper: resolves decomposed test steps to page-object methods and
plans the navigation a test needs before its first action.

Public entry point: action_mapper.app.ActionMapperApp
"""
