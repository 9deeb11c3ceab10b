STORY_PROMPT_TEMPLATE = """
You are an expert business analyst. Given the following Business Requirements Document (BRD), generate at least 7 Epics and 3-4 User Stories per Epic.

For each Epic, provide:
- epic_name: A clear, concise name for the epic
- epic_description: A detailed description of what the epic covers

For each User Story within an Epic, provide:
- story_name: A clear, concise name for the user story
- description: The user story in the format "As a [user type], I want [goal] so that [benefit]"
- label: A category for the story (e.g. "Authentication", "UI/UX", "API")
- status: One of "To Do", "In Progress", "Ready", "Done"
- acceptance_criteria: An array of specific, testable criteria (3-5 items)
- nfrs: An array of Non-Functional Requirements (2-3 items)
- definition_of_done: An array of completion criteria (3-4 items)
- definition_of_ready: An array of readiness criteria (3-4 items)

Generate a MINIMUM of 7 Epics, each with 3-4 User Stories.

Return ONLY a valid JSON object in exactly this format:
{{
  "epics": [
    {{
      "epic_name": "Example Epic Name",
      "epic_description": "Detailed description of the epic...",
      "user_stories": [
        {{
          "story_name": "Example Story Name",
          "description": "As a user, I want to do something so that I can achieve a goal",
          "label": "Category",
          "status": "To Do",
          "acceptance_criteria": ["Criteria 1", "Criteria 2", "Criteria 3"],
          "nfrs": ["NFR 1", "NFR 2"],
          "definition_of_done": ["DoD 1", "DoD 2", "DoD 3"],
          "definition_of_ready": ["DoR 1", "DoR 2", "DoR 3"]
        }}
      ]
    }}
  ]
}}

BRD Content:
{content}
"""


def build_story_prompt(document_text: str) -> str:
    return STORY_PROMPT_TEMPLATE.format(content=document_text)
