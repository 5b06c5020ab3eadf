# Canned responses used by the chatbot when neither the learned store nor the
# knowledge base has an answer. Texts may use the {businessName}, {userName}
# and {platformName} placeholders.
import re
from typing import Dict, List

RESPONSE_RULES: Dict[str, List[Dict]] = {
    'greeting': [
        {
            'keywords': ['hello', 'hi', 'hey', 'greetings', 'howdy'],
            'response': {
                'text': "Hello {userName}! I'm the {platformName} assistant for {businessName}. How can I help you today?",
                'suggestions': [
                    {'id': 'projects', 'text': 'Tell me about projects'},
                    {'id': 'tasks', 'text': 'Task management'},
                    {'id': 'timeTracking', 'text': 'Time tracking help'},
                    {'id': 'teams', 'text': 'Team management'},
                ],
            },
        },
        {
            'keywords': ['how are you', "how's it going", 'how are things', 'how do you do', "what's up", 'how you doing'],
            'response': {
                'text': "I'm doing well, thanks for asking! I'm here to help with any questions you have about "
                        "{platformName} for {businessName}. How can I assist you today?",
                'suggestions': [
                    {'id': 'help', 'text': 'What can you help with?'},
                    {'id': 'features', 'text': 'Show me key features'},
                    {'id': 'get_started', 'text': 'How do I get started?'},
                ],
            },
        },
        {
            'keywords': ['thank you', 'thanks', 'appreciate it', 'awesome', 'great', 'thank', 'thx'],
            'response': {
                'text': "You're welcome! I'm happy to help. Is there anything else you'd like to know about {platformName}?",
                'suggestions': [
                    {'id': 'more_help', 'text': 'I need more help'},
                    {'id': 'features', 'text': 'Show me features'},
                    {'id': 'no_thanks', 'text': "That's all for now"},
                ],
            },
        },
    ],
    'about': [
        {
            'keywords': ['who are you', 'what are you', 'what is this', 'what can you do', 'what do you do'],
            'response': {
                'text': "I'm your {platformName} assistant for {businessName}. I can help with questions about projects, "
                        "tasks, time tracking, team management, and more. What would you like to know about?",
                'suggestions': [
                    {'id': 'features', 'text': 'What features do you offer?'},
                    {'id': 'start', 'text': 'Help me get started'},
                    {'id': 'support', 'text': 'I need support'},
                ],
            },
        },
        {
            'keywords': ['what is staffluent', 'what does staffluent do', 'staffluent', 'explain staffluent', 'about staffluent'],
            'response': {
                'text': "{platformName} is a workforce management platform that helps {businessName} manage projects, tasks, "
                        "teams, time tracking, field service operations, client relationships, and more.",
                'suggestions': [
                    {'id': 'core_features', 'text': 'Core features'},
                    {'id': 'benefits', 'text': 'Key benefits'},
                    {'id': 'tour', 'text': 'Take a tour'},
                ],
            },
        },
        {
            'keywords': ['features', 'capabilities', 'what can it do', 'functionality', 'tools', 'modules'],
            'response': {
                'text': "{platformName} offers {businessName} project management, task tracking, time & attendance, team "
                        "management, field service operations, client management, reporting & analytics, quality control, "
                        "and equipment management. Which feature would you like to learn more about?",
                'suggestions': [
                    {'id': 'projects', 'text': 'Project management'},
                    {'id': 'time', 'text': 'Time tracking'},
                    {'id': 'teams', 'text': 'Team management'},
                    {'id': 'field', 'text': 'Field service'},
                ],
            },
        },
        {
            'keywords': ['benefits', 'advantages', 'why use', 'value', 'roi', 'return on investment'],
            'response': {
                'text': "{platformName} helps {businessName} boost productivity, reduce administrative overhead, improve "
                        "resource allocation, and gain better visibility into operations.",
                'suggestions': [
                    {'id': 'case_studies', 'text': 'Success stories'},
                    {'id': 'pricing', 'text': 'Pricing info'},
                    {'id': 'demo', 'text': 'Request a demo'},
                ],
            },
        },
    ],
    'projects': [
        {
            'keywords': ['project', 'projects'],
            'response': {
                'text': "{platformName} provides {businessName} with comprehensive project management tools. You can create "
                        "projects, assign teams, track progress, and manage tasks.",
                'suggestions': [
                    {'id': 'create_project', 'text': 'Create a new project'},
                    {'id': 'view_projects', 'text': 'View my projects'},
                    {'id': 'project_reports', 'text': 'Project reports'},
                ],
            },
        },
    ],
    'tasks': [
        {
            'keywords': ['task', 'tasks', 'todo', 'assignment', 'assign'],
            'response': {
                'text': "With {platformName}, tasks for {businessName} can be created, assigned, prioritized, and tracked "
                        "to completion.",
                'suggestions': [
                    {'id': 'create_task', 'text': 'Create a task'},
                    {'id': 'assign_task', 'text': 'Assign tasks'},
                    {'id': 'track_tasks', 'text': 'Track task completion'},
                ],
            },
        },
        {
            'keywords': ['auto', 'automatic', 'auto-assign', 'auto assignment', 'assignment'],
            'response': {
                'text': "{platformName} provides {businessName} with auto-assignment capabilities that assign tasks to the "
                        "most suitable team members based on skills, workload, and availability.",
                'suggestions': [
                    {'id': 'auto_assign_setup', 'text': 'Set up auto-assignment'},
                    {'id': 'auto_assign_trigger', 'text': 'Trigger auto-assignment'},
                    {'id': 'pending_approvals', 'text': 'Pending approvals'},
                ],
            },
        },
    ],
    'time': [
        {
            'keywords': ['time', 'clock', 'hours', 'timesheet', 'tracking', 'attendance', 'time tracking'],
            'response': {
                'text': "{platformName}'s time tracking system lets {businessName} employees clock in/out, manage breaks, "
                        "and review timesheets.",
                'suggestions': [
                    {'id': 'time_clock', 'text': 'Clock in/out'},
                    {'id': 'breaks', 'text': 'Manage breaks'},
                    {'id': 'timesheets', 'text': 'View timesheets'},
                ],
            },
        },
    ],
    'team': [
        {
            'keywords': ['team', 'staff', 'employee', 'member', 'personnel'],
            'response': {
                'text': "Using {platformName}, {businessName} can organize staff into departments and teams, assign "
                        "leaders, and monitor performance.",
                'suggestions': [
                    {'id': 'view_team', 'text': 'View my team'},
                    {'id': 'add_member', 'text': 'Add team member'},
                    {'id': 'team_schedule', 'text': 'Team scheduling'},
                ],
            },
        },
    ],
    'communication': [
        {
            'keywords': ['chat', 'message', 'messaging', 'communication', 'communicate', 'conversation'],
            'response': {
                'text': "{platformName} includes team chat and client messaging so {businessName} can keep conversations "
                        "next to the projects and tasks they belong to.",
                'suggestions': [
                    {'id': 'team_chat', 'text': 'Team chat'},
                    {'id': 'client_messages', 'text': 'Client messaging'},
                    {'id': 'notifications', 'text': 'Notification settings'},
                ],
            },
        },
    ],
    'reports': [
        {
            'keywords': ['report', 'analytics', 'metrics', 'performance', 'statistics', 'stats', 'dashboard'],
            'response': {
                'text': "{platformName} provides {businessName} with detailed analytics on productivity, project "
                        "progress, task completion, and more.",
                'suggestions': [
                    {'id': 'performance_reports', 'text': 'Performance reports'},
                    {'id': 'time_reports', 'text': 'Time & attendance reports'},
                    {'id': 'export_data', 'text': 'Export data'},
                ],
            },
        },
    ],
    'operations': [
        {
            'keywords': ['field', 'service', 'field service', 'location', 'site', 'remote'],
            'response': {
                'text': "{platformName}'s field service features help {businessName} manage operations outside the "
                        "office, including location tracking and service scheduling.",
                'suggestions': [
                    {'id': 'field_locations', 'text': 'Field locations'},
                    {'id': 'service_schedule', 'text': 'Service scheduling'},
                    {'id': 'field_reporting', 'text': 'Field reporting'},
                ],
            },
        },
        {
            'keywords': ['client', 'customer', 'account', 'portal'],
            'response': {
                'text': "{platformName} helps {businessName} manage client relationships, track communications, and "
                        "handle client requests.",
                'suggestions': [
                    {'id': 'add_client', 'text': 'Add a client'},
                    {'id': 'client_portal', 'text': 'Client portal features'},
                    {'id': 'client_invoices', 'text': 'Client invoicing'},
                ],
            },
        },
        {
            'keywords': ['quality', 'inspection', 'compliance', 'safety', 'audit', 'osha'],
            'response': {
                'text': "{platformName}'s quality control features help {businessName} conduct inspections, ensure "
                        "compliance with standards, and maintain safety protocols.",
                'suggestions': [
                    {'id': 'create_inspection', 'text': 'Create inspection'},
                    {'id': 'compliance_report', 'text': 'Compliance report'},
                    {'id': 'safety_checklist', 'text': 'Safety checklists'},
                ],
            },
        },
        {
            'keywords': ['equipment', 'asset', 'tool', 'inventory', 'maintenance'],
            'response': {
                'text': "{platformName} includes equipment management tools for {businessName} to track assets, "
                        "schedule maintenance, and monitor usage.",
                'suggestions': [
                    {'id': 'track_equipment', 'text': 'Track equipment'},
                    {'id': 'maintenance_schedule', 'text': 'Maintenance schedule'},
                    {'id': 'equipment_assignment', 'text': 'Equipment assignment'},
                ],
            },
        },
    ],
    'support': [
        {
            'keywords': ['help', 'assistance', 'guide', 'how to', 'how do i', 'help me'],
            'response': {
                'text': "I can help with how {businessName} can use {platformName} for managing projects, tracking time, "
                        "organizing teams, and more. What do you need help with?",
                'suggestions': [
                    {'id': 'projects_help', 'text': 'Projects help'},
                    {'id': 'tasks_help', 'text': 'Tasks help'},
                    {'id': 'time_help', 'text': 'Time tracking help'},
                    {'id': 'teams_help', 'text': 'Team management help'},
                ],
            },
        },
        {
            'keywords': ['get started', 'setup', 'begin', 'start', 'onboarding', 'first steps'],
            'response': {
                'text': "Getting started with {platformName} is easy for {businessName}. Begin by setting up your team "
                        "members, creating your first project, and configuring your dashboard.",
                'suggestions': [
                    {'id': 'setup_team', 'text': 'Set up my team'},
                    {'id': 'first_project', 'text': 'Create first project'},
                    {'id': 'dashboard', 'text': 'Configure dashboard'},
                ],
            },
        },
        {
            'keywords': ['price', 'pricing', 'cost', 'subscription', 'plan', 'payment', 'fee'],
            'response': {
                'text': "{platformName} offers Basic, Professional, and Enterprise plans with monthly or annual billing. "
                        "Would you like more details about the plan that fits {businessName}?",
                'suggestions': [
                    {'id': 'basic_plan', 'text': 'Basic plan details'},
                    {'id': 'professional_plan', 'text': 'Professional plan details'},
                    {'id': 'enterprise_plan', 'text': 'Enterprise plan details'},
                ],
            },
        },
        {
            'keywords': ['support', 'help desk', 'contact', 'technical help'],
            'response': {
                'text': "{platformName} supports {businessName} through the help center, email support, and dedicated "
                        "account managers for Enterprise customers.",
                'suggestions': [
                    {'id': 'help_center', 'text': 'Visit help center'},
                    {'id': 'contact_support', 'text': 'Contact support'},
                    {'id': 'premium_support', 'text': 'Premium support options'},
                ],
            },
        },
        {
            'keywords': ['training', 'learn', 'tutorial', 'documentation', 'how to use'],
            'response': {
                'text': "{platformName} offers training resources for {businessName} including interactive tutorials, "
                        "video guides, documentation, and live webinars.",
                'suggestions': [
                    {'id': 'tutorials', 'text': 'Interactive tutorials'},
                    {'id': 'videos', 'text': 'Video guides'},
                    {'id': 'webinars', 'text': 'Upcoming webinars'},
                ],
            },
        },
        {
            'keywords': ['mobile', 'app', 'phone', 'tablet', 'ios', 'android', 'smartphone'],
            'response': {
                'text': "{platformName} has mobile apps for iOS and Android. {businessName} team members can manage "
                        "projects, track time, update tasks, and access reports on the go.",
                'suggestions': [
                    {'id': 'ios_app', 'text': 'iOS app features'},
                    {'id': 'android_app', 'text': 'Android app features'},
                    {'id': 'offline_mode', 'text': 'Offline capabilities'},
                ],
            },
        },
        {
            'keywords': ['integration', 'connect', 'sync', 'api', 'third party', 'other software'],
            'response': {
                'text': "{platformName} integrates with tools {businessName} might already use, including Slack, "
                        "Microsoft 365, Google Workspace, and QuickBooks, and offers an API for custom integrations.",
                'suggestions': [
                    {'id': 'integration_list', 'text': 'View all integrations'},
                    {'id': 'api_docs', 'text': 'API documentation'},
                    {'id': 'custom_integration', 'text': 'Request custom integration'},
                ],
            },
        },
        {
            'keywords': ['security', 'privacy', 'data protection', 'encryption', 'gdpr', 'hipaa'],
            'response': {
                'text': "{platformName} protects {businessName}'s data with enterprise-grade encryption, regular "
                        "security audits, and strict access controls.",
                'suggestions': [
                    {'id': 'security_features', 'text': 'Security features'},
                    {'id': 'compliance', 'text': 'Compliance certifications'},
                    {'id': 'privacy_policy', 'text': 'Privacy policy'},
                ],
            },
        },
    ],
}

VIEW_RESPONSES: Dict[str, Dict] = {
    'dashboard': {
        'text': "Hello {userName}! You're currently on the {platformName} Dashboard for {businessName}. Here you can "
                "see key metrics and an overview of your business activities.",
        'suggestions': [
            {'id': 'dashboard_metrics', 'text': 'Explain dashboard metrics'},
            {'id': 'performance_overview', 'text': 'Performance overview'},
        ],
    },
    'projects': {
        'text': "You're in the Projects section of {platformName}. Here you can manage all {businessName} projects "
                "and their details.",
        'suggestions': [
            {'id': 'create_project', 'text': 'Create a new project'},
            {'id': 'project_status', 'text': 'Update project status'},
        ],
    },
    'tasks': {
        'text': "You're in the Tasks section of {platformName}. Here you can create, assign, and track tasks across "
                "your {businessName} team.",
        'suggestions': [
            {'id': 'create_task', 'text': 'Create a new task'},
            {'id': 'assign_task', 'text': 'Assign a task'},
        ],
    },
    'team': {
        'text': "You're in the Team section of {platformName}. Here you can manage {businessName} team members and "
                "their assignments.",
        'suggestions': [
            {'id': 'add_member', 'text': 'Add team member'},
            {'id': 'team_schedule', 'text': 'Team scheduling'},
        ],
    },
    'time': {
        'text': "You're in the Time Tracking section of {platformName}. Here you can manage {businessName} "
                "attendance and timesheets.",
        'suggestions': [
            {'id': 'time_entry', 'text': 'Enter time'},
            {'id': 'view_timesheets', 'text': 'View timesheets'},
        ],
    },
    'field': {
        'text': "You're in the Field Operations section of {platformName}. Here you can manage {businessName} field "
                "services and remote teams.",
        'suggestions': [
            {'id': 'field_map', 'text': 'View field map'},
            {'id': 'field_staff', 'text': 'Field staff'},
        ],
    },
    'clients': {
        'text': "You're in the Client Management section of {platformName}. Here you can manage {businessName} "
                "client accounts and relationships.",
        'suggestions': [
            {'id': 'add_client', 'text': 'Add new client'},
            {'id': 'client_invoices', 'text': 'Client invoices'},
        ],
    },
    'autoAssignment': {
        'text': "You're in the Auto Assignment section of {platformName}. Here you can configure how tasks are "
                "automatically assigned to {businessName} team members.",
        'suggestions': [
            {'id': 'configure_weights', 'text': 'Configure assignment weights'},
            {'id': 'pending_approvals', 'text': 'View pending approvals'},
            {'id': 'assignment_history', 'text': 'View assignment history'},
        ],
    },
    'equipment': {
        'text': "You're in the Equipment Management section of {platformName}. Here you can track {businessName} "
                "assets, schedule maintenance, and manage equipment assignments.",
        'suggestions': [
            {'id': 'add_equipment', 'text': 'Add equipment'},
            {'id': 'maintenance', 'text': 'Schedule maintenance'},
            {'id': 'equipment_logs', 'text': 'Equipment logs'},
        ],
    },
    'quality': {
        'text': "You're in the Quality Control section of {platformName}. Here you can manage {businessName} "
                "inspections, compliance, and safety protocols.",
        'suggestions': [
            {'id': 'create_inspection', 'text': 'Create inspection'},
            {'id': 'compliance_report', 'text': 'Compliance report'},
            {'id': 'safety_checklist', 'text': 'Safety checklists'},
        ],
    },
    'reports': {
        'text': "You're in the Reports section of {platformName}. Here you can generate and view analytics on "
                "various aspects of {businessName}.",
        'suggestions': [
            {'id': 'performance_report', 'text': 'Performance reports'},
            {'id': 'time_report', 'text': 'Time reports'},
            {'id': 'export_data', 'text': 'Export data'},
        ],
    },
}

# (verb, item pattern, response); first matching entry wins
SPECIFIC_QUESTIONS = [
    ('create', r'projects?', {
        'text': "To create a new project for {businessName}, go to the Projects section in {platformName} and click "
                "'Create Project'. Fill in the name, description, start and end dates, and assign team members.",
        'suggestions': [
            {'id': 'project_template', 'text': 'Use project template'},
            {'id': 'project_settings', 'text': 'Project settings'},
        ],
    }),
    ('create', r'tasks?', {
        'text': "To create a task for {businessName}, open the Tasks section in {platformName} and click 'New Task'. "
                "You can set a name, description, due date, priority level, and assignees.",
        'suggestions': [
            {'id': 'task_priority', 'text': 'Set task priority'},
            {'id': 'task_assignment', 'text': 'Task assignment'},
        ],
    }),
    ('create', r'teams?', {
        'text': "To create a new team for {businessName}, go to Team Management in {platformName} and select "
                "'Create Team'. Provide a team name, select a department, and add team members.",
        'suggestions': [
            {'id': 'team_structure', 'text': 'Team structure'},
            {'id': 'team_roles', 'text': 'Define team roles'},
        ],
    }),
    ('manage', r'projects?', {
        'text': "To manage {businessName} projects in {platformName}, use the Projects dashboard to track progress, "
                "update status, manage tasks, assign team members, and monitor timelines.",
        'suggestions': [
            {'id': 'project_progress', 'text': 'Update project progress'},
            {'id': 'project_team', 'text': 'Manage project team'},
        ],
    }),
    ('manage', r'teams?', {
        'text': "Team management for {businessName} is done through the Teams section in {platformName}. Organize "
                "members, assign roles, monitor performance, and handle scheduling.",
        'suggestions': [
            {'id': 'team_schedule', 'text': 'Team scheduling'},
            {'id': 'team_performance', 'text': 'Performance tracking'},
        ],
    }),
    ('track', r'(time|hours)', {
        'text': "Time tracking for {businessName} uses the {platformName} Time & Attendance module. Clock in/out, "
                "log breaks, and record time spent on tasks or projects.",
        'suggestions': [
            {'id': 'time_reports', 'text': 'Time reports'},
            {'id': 'timesheet', 'text': 'View timesheets'},
        ],
    }),
    ('track', r'(progress|status)', {
        'text': "You can track {businessName} progress in the {platformName} Projects section by updating completion "
                "percentages, milestones, and task statuses.",
        'suggestions': [
            {'id': 'progress_report', 'text': 'Progress reports'},
            {'id': 'milestone_tracking', 'text': 'Milestone tracking'},
        ],
    }),
]

SPECIFIC_QUESTION_PATTERN = re.compile(r"how\s+(?:do\s+i|to|can\s+i)\s+(create|manage|track)\s+(?:(?:a|an|my|the)\s+)?(\w+)")

CONVERSATION_RESPONSES: Dict[str, Dict] = {
    'greeting': {
        'text': "Hello {userName}! Welcome to the {platformName} assistant for {businessName}. What can I help you with today?",
        'suggestions': [
            {'id': 'projects', 'text': 'Tell me about projects'},
            {'id': 'tasks', 'text': 'Task management'},
            {'id': 'features', 'text': 'Show me key features'},
        ],
    },
    'how_are_you': {
        'text': "I'm doing great, thanks for asking {userName}! How can I help {businessName} with {platformName} today?",
        'suggestions': [
            {'id': 'help', 'text': 'What can you help with?'},
            {'id': 'features', 'text': 'Show me key features'},
        ],
    },
    'whats_up': {
        'text': "Not much, just here to help {businessName} get the most out of {platformName}. What's on your mind?",
        'suggestions': [
            {'id': 'features', 'text': 'Show me key features'},
            {'id': 'get_started', 'text': 'How do I get started?'},
        ],
    },
    'time_of_day': {
        'text': "Good {timeOfDay}, {userName}! I'm the {platformName} assistant for {businessName}. How can I help?",
        'suggestions': [
            {'id': 'projects', 'text': 'Tell me about projects'},
            {'id': 'timeTracking', 'text': 'Time tracking help'},
        ],
    },
}

CLOSURE_RESPONSE = {
    'text': "Glad I could help, {userName}! If anything else comes up with {platformName}, just send a message. Have a great day!",
    'suggestions': [],
}

DEFAULT_RESPONSE = {
    'text': "I'm not sure I understand your question about \"{message}\". Could you try rephrasing or select one of these options?",
    'suggestions': [
        {'id': 'help', 'text': 'Show all help topics'},
        {'id': 'projects', 'text': 'Projects'},
        {'id': 'tasks', 'text': 'Tasks'},
        {'id': 'time', 'text': 'Time tracking'},
    ],
}

FEATURE_INQUIRY_PATTERN = re.compile(
    r"\b(do you (offer|have|support|provide)|is there|are there|does (it|staffluent|the platform) "
    r"(have|support|offer)|can i use|tell me about|how does|what about)\b"
)

PLATFORM_FEATURES = [
    'chat', 'messaging', 'communication', 'project', 'task', 'time tracking', 'timesheet', 'team',
    'report', 'dashboard', 'analytics', 'client', 'field service', 'equipment', 'inventory',
    'quality', 'inspection', 'compliance', 'osha', 'schedule', 'shift', 'invoice', 'mobile app',
]


def flatten_rules(rules: Dict[str, List[Dict]]) -> List[Dict]:
    """Turn the categorized table into a flat list of rules tagged with their category."""
    return [
        {'category': category, 'keywords': rule['keywords'], 'response': rule['response']}
        for category, category_rules in rules.items()
        for rule in category_rules
    ]
