EXPLAIN_SYSTEM_PROMPT: str = """
You are a helpful assistant that explains Git changes in a concise way.
Focus only on the most significant changes and their direct impact.
When answering specific questions, address them directly and precisely.
Keep explanations brief but informative and don't ask for further explanations.
Use markdown for clarity.
"""

DRAFT_SYSTEM_PROMPT: str = """
You are a commit message generator that follows these rules:
1. Write in present tense
2. Be concise and direct
3. Output only the commit message without any explanations
4. Follow the format: <type>(<optional scope>): <commit message>
"""

COMMIT_TYPES: str = """{
  "docs": "Documentation only changes",
  "style": "Changes that do not affect the meaning of the code",
  "refactor": "A code change that neither fixes a bug nor adds a feature",
  "perf": "A code change that improves performance",
  "test": "Adding missing tests or correcting existing tests",
  "build": "Changes that affect the build system or external dependencies",
  "ci": "Changes to CI configuration files and scripts",
  "chore": "Other changes that don't modify src or test files",
  "revert": "Reverts a previous commit",
  "feat": "A new feature",
  "fix": "A bug fix"
}"""

EXPLAIN_COMMIT_TEMPLATE: str = """Explain the changes in this commit.

Commit message:
{message}

Diff:
```diff
{diff}
```"""

EXPLAIN_DIFF_TEMPLATE: str = """Explain the following {origin}.

Diff:
```diff
{diff}
```"""

QUESTION_TEMPLATE: str = """

Question about the changes: {question}"""

DRAFT_TEMPLATE: str = """Generate a concise git commit message written in present tense for the following code diff with the given specifications below:

The output response must be in format:
<type>(<optional scope>): <commit message>
Choose a type from the type-to-description JSON below that best describes the git diff:
{commit_types}
Focus on being accurate and concise.{context}
Commit message must be a maximum of 72 characters.
Exclude anything unnecessary such as translation. Your entire response will be passed directly into git commit.

Code diff:
```diff
{diff}
```"""

CONTEXT_TEMPLATE: str = """
Use the following context to understand intent:
{context}"""
