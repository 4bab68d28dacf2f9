"""Default rubric data for the engineering role family."""

LEVEL_LABELS = {1: "Foundational", 2: "Competent", 3: "Advanced", 4: "Expert"}

UNIVERSAL_DIMENSIONS = [
    {
        "slug": "communication",
        "name": "Communication",
        "description": "Clarity, listening, adaptation to audience, ability to explain and defend decisions.",
        "levels": {
            1: ("Struggles to convey ideas clearly; communication creates friction rather than reducing it.",
                ["Responses are vague, unfocused, or hard to follow",
                 "Cannot explain what their work does or why when asked"]),
            2: ("Communicates clearly enough to move work forward without frequent misunderstandings.",
                ["Answers questions with relevant, understandable responses",
                 "Asks basic clarifying questions when needed"]),
            3: ('Communicates with structure and intent; explains the "why", not just the "what".',
                ["Structures explanations with context before detail",
                 "Explains trade-offs and alternatives, not just what they did"]),
            4: ("Communication builds confidence and clarity for everyone involved.",
                ["Communicates status and blockers proactively without being asked",
                 "Defends decisions persuasively while remaining open to feedback"]),
        },
    },
    {
        "slug": "practical_maturity",
        "name": "Practical Maturity",
        "description": "Judgment around trade-offs, scope, constraints, and pragmatic decision-making.",
        "levels": {
            1: ("Does not account for real-world constraints; effort is misallocated relative to the task.",
                ["Spends most of the time on low-priority details while ignoring core requirements",
                 "Cannot identify any trade-offs when asked"]),
            2: ("Shows awareness of constraints and delivers a solution roughly proportional to the task.",
                ["Addresses core requirements before moving to extras",
                 "Can identify at least one trade-off they made when asked"]),
            3: ("Actively manages scope and trade-offs with deliberate pragmatic choices.",
                ["Explicitly prioritizes work items and explains reasoning",
                 "Cuts scope when time is short rather than leaving things half-done"]),
            4: ("Every decision reflects awareness of constraints, impact, and what matters most.",
                ["Delivers a working, complete solution within constraints",
                 "Identifies debt they introduced and what they would improve given more time"]),
        },
    },
    {
        "slug": "collaboration_coachability",
        "name": "Collaboration & Coachability",
        "description": "How the candidate responds to feedback, asks for help, and interacts with teammates.",
        "levels": {
            1: ("Does not engage constructively with others; feedback is ignored or met with resistance.",
                ["Dismisses or ignores feedback",
                 "Does not engage with colleagues"]),
            2: ("Engages respectfully and incorporates feedback when given.",
                ["Accepts feedback politely and acknowledges suggestions",
                 "Incorporates at least one piece of feedback into their work"]),
            3: ("Treats interactions as collaborative and engages with feedback as a dialogue.",
                ["Asks clarifying questions when feedback is ambiguous rather than guessing",
                 "Credits suggestions from others when explaining decisions"]),
            4: ("Makes the people around them more effective.",
                ["Seeks out the right colleague early instead of staying blocked",
                 "Turns feedback into visibly improved work within the session"]),
        },
    },
]

ENGINEERING_ROLE_FAMILY = {
    "slug": "engineering",
    "name": "Software Engineering",
    "dimensions": [
        {
            "slug": "problem_decomposition_design",
            "name": "Problem Decomposition & Design",
            "description": "How the candidate structures problems, breaks them into parts, and designs solutions.",
            "levels": {
                1: ("Jumps into implementation without understanding or structuring the problem.",
                    ["Starts coding immediately without asking clarifying questions",
                     "No visible plan or task breakdown before implementation"]),
                2: ("Identifies the core problem and works through it in a roughly logical order.",
                    ["Asks at least a few clarifying questions during kickoff",
                     "Solution addresses the core requirement but may miss boundary conditions"]),
                3: ("Deliberately structures the problem before solving it, considering multiple angles.",
                    ["Breaks the problem into distinct subproblems before coding",
                     "Identifies edge cases or failure scenarios without prompting"]),
                4: ("Structures problems with rigor that accounts for dependencies, risks, and future implications.",
                    ["Plans work by dependency and risk, not just by feature",
                     "Articulates alternative designs they considered and why they rejected them"]),
            },
        },
        {
            "slug": "technical_execution",
            "name": "Technical Execution",
            "description": "Quality, correctness, and efficiency of code produced.",
            "levels": {
                1: ("Produces code that does not work or requires significant external help to function.",
                    ["Code does not run or produces incorrect output for the primary use case",
                     "No evidence of testing or verifying any part of the solution"]),
                2: ("Produces working code that solves the core problem.",
                    ["Code runs and produces correct output for the primary use case",
                     "Makes at least one attempt to verify output"]),
                3: ("Produces clean, correct code that handles more than the happy path.",
                    ["Code handles edge cases explicitly",
                     "Demonstrates systematic debugging when something goes wrong"]),
                4: ("Produces code that reads as production-quality.",
                    ["Error handling covers realistic failure modes",
                     "Can discuss the runtime characteristics and limitations of their solution"]),
            },
        },
        {
            "slug": "learning_velocity",
            "name": "Learning Velocity",
            "description": "Speed of adapting to new information, tools, or feedback during the session.",
            "levels": {
                1: ("Does not adapt when new information is available.",
                    ["Repeats the same approach after it has already failed",
                     "Does not adjust when given direct feedback"]),
                2: ("Adapts when given explicit guidance.",
                    ["Looks up documentation or references when stuck",
                     "Does not repeat the same mistake once corrected"]),
                3: ("Picks up on signals quickly and generalizes learning across contexts.",
                    ["Figures out an unfamiliar API independently within a reasonable time",
                     "Applies a lesson from one part of the task to another"]),
                4: ("Integrates new information almost immediately with visible improvement.",
                    ["Adjusts approach mid-stream based on new information",
                     "Articulates what they learned during the process"]),
            },
        },
        {
            "slug": "work_process",
            "name": "Work Process",
            "description": "How the candidate approaches the work itself: AI tools, time management, testing, reading requirements.",
            "levels": {
                1: ("No discernible workflow; approach is disorganized.",
                    ["If using AI tools, copy-pastes output without reading or verifying it",
                     "Does not test or verify any output before submitting"]),
                2: ("Follows a recognizable workflow and uses tools with basic diligence.",
                    ["Works roughly sequentially (read, plan, code, test)",
                     "Tests the happy path before moving on"]),
                3: ("Works with a clear, deliberate process and uses tools strategically.",
                    ["If using AI tools, adapts and edits suggestions rather than accepting verbatim",
                     "Manages time visibly by checking progress and adjusting scope"]),
                4: ("Workflow is efficient, disciplined, and self-aware.",
                    ["Uses AI tools as an accelerator while understanding the output",
                     "Testing is part of the implementation process, not an afterthought"]),
            },
        },
    ],
    "red_flags": [
        ("misrepresentation", "Misrepresentation",
         "Claims code does something it doesn't, or overstates what they built."),
        ("unverified_ai_usage", "Unverified AI Usage",
         "Copies AI-generated code without reading, understanding, or testing it."),
        ("feedback_dismissal", "Feedback Dismissal",
         "Repeatedly ignores or argues against valid feedback during PR defense."),
        ("requirements_ignored", "Requirements Ignored",
         "Misses clearly stated requirements that were available in the brief."),
        ("no_verification", "No Verification",
         "Submits code without any form of testing or checking."),
        ("time_mismanagement", "Time Mismanagement",
         "Spends more than half of coding time on setup, tangents, or non-core features."),
    ],
}
