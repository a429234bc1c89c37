COACH_SYSTEM_PROMPT = (
    "You are an expert tennis coach AI with 20+ years of experience in tennis training and player "
    "development. Generate practical, age-appropriate training plans that focus on skill progression "
    "and player safety. Respond with a single raw JSON object and nothing else."
)

PROGRESS_SYSTEM_PROMPT = (
    "You are an expert tennis coach AI that provides detailed progress analysis for tennis students. "
    "Focus on specific, actionable insights and recommendations. "
    "Respond with a single raw JSON object and nothing else."
)

DRILLS_SYSTEM_PROMPT = (
    "You are an expert tennis coach AI. Provide practical, safe, and effective tennis drills that are "
    "appropriate for the specified age group and skill level. Focus on clear, step-by-step instructions. "
    "Respond with a single raw JSON object and nothing else."
)

RETENTION_SYSTEM_PROMPT = (
    "You are an expert tennis coach AI specializing in student retention and motivation. Provide "
    "practical, empathetic interventions that address both technical and motivational aspects of "
    "tennis training. Respond with a single raw JSON object and nothing else."
)

DRILL_SHAPE = """{
  "name": "Drill Name",
  "description": "Brief description",
  "duration": "15-20 mins",
  "difficulty": "beginner/intermediate/advanced",
  "equipment": ["racket", "balls"],
  "steps": ["step1", "step2", "step3"]
}"""

TRAINING_PLAN_PROMPT = """Generate a weekly training plan for a tennis student.

Student: {name}
Age: {age}
Current Skill Level: {skill_level}
Current Skills (1-10 scale):
- Serve: {serve}
- Footwork: {footwork}
- Stamina: {stamina}
- Mental Focus: {mental_focus}
{focus_line}
Include the main focus areas, drills for 4-5 days with steps, duration and equipment,
and progress goals for the week.

Use this JSON structure:
{{
  "week": 1,
  "focus_areas": ["area1", "area2"],
  "days": [
    {{"day": "Day 1-2", "drills": [<drill>], "notes": "coaching notes"}}
  ],
  "progress_goals": ["goal1", "goal2"]
}}
where each <drill> is:
{drill_shape}"""

PROGRESS_SUMMARY_PROMPT = """Analyze the weekly progress for tennis student {name}.

Previous Skills (1-10 scale):
- Serve: {previous.serve}
- Footwork: {previous.footwork}
- Stamina: {previous.stamina}
- Mental Focus: {previous.mental_focus}

Current Skills (1-10 scale):
- Serve: {current.serve}
- Footwork: {current.footwork}
- Stamina: {current.stamina}
- Mental Focus: {current.mental_focus}

Session Notes: {notes}
Attendance Rate: {attendance_rate}%

Use this JSON structure:
{{
  "summary": "Overall progress summary in 2-3 sentences",
  "improvements": ["improvement 1"],
  "concerns": ["concern 1"],
  "recommendations": ["recommendation 1"],
  "next_week_focus": ["focus area 1"]
}}"""

DRILLS_PROMPT = """Provide tennis drill recommendations for the following request:

Query: "{query}"
{age_line}{level_line}
Generate 3-5 specific tennis drills that address this request.

Use this JSON structure:
{{"drills": [<drill>]}}
where each <drill> is:
{drill_shape}"""

DROPOUT_RISK_PROMPT = """Analyze dropout risk for tennis student {name} and create a retention plan.

- Attendance Rate: {attendance_rate}%
- Skill Progression: {progression} (overall scores, oldest to newest)
- Consecutive Missed Sessions: {missed_sessions}
- Recent Session Notes: {notes}

Use this JSON structure:
{{
  "risk_factors": ["factor1"],
  "interventions": ["intervention1"],
  "timeline": "2-4 weeks",
  "success_metrics": ["metric1"]
}}"""
