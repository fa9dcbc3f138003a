"""
Pulse Copilot core: the AI command execution pipeline.

1. ROUTER (router/)
   - Utterance + context prompt → BatchPlan
   - Session reuse keyed by prompt hash, retries, deterministic fallback

2. COMMANDS (commands/)
   - Raw {action, parameters} entries → typed commands, never raising

3. VALIDATION (validation/)
   - Pure range and membership checks run by every executor

4. EXECUTOR (executor/)
   - Consistent sample choice, track provisioning, conflict shifting
   - Sequential, isolated steps against an explicit ProjectStore

5. PROJECT STORE (project_store.py)
   - In-memory project mutation API with events and undo groups
"""
