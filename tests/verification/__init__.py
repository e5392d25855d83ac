"""
Verification Portfolio Tests

This package contains tests for the verification techniques and the
composite scorer that turns their results into an accept, mend, or
human review decision.

Test Modules:
- test_base: Technique contract and result model tests
- test_commands: Command runner and source I/O tests
- test_mutation: Mutation testing technique tests
- test_translation: Translation validation technique tests
- test_scores: Composite scoring tests
"""
