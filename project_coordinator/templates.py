"""
Markdown templates for the knowledge base

Default reference documents seeded on first start, plus the generated
project summary and index pages.
"""

from datetime import datetime
from typing import Iterable

from .models import Project
from .utils.dates import format_display

QUICK_REFERENCE = """## Common Patterns & Solutions

### Swift Patterns
- Async/Await: See patterns/swift-patterns.md
- Error Handling: See patterns/swift-patterns.md

### Xcode Tips
- Build Issues: See tools/troubleshooting.md

## Quick Commands
- List all projects: `list_projects`
- Search patterns: `search_code_patterns [pattern]`
- Update status: `update_project_status [project] [status]`
"""

SWIFT_PATTERNS = """# Swift Code Patterns

## Async/Await Patterns

### Basic Async Function
```swift
func fetchData() async throws -> [DataModel] {
    let (data, _) = try await URLSession.shared.data(from: url)
    return try JSONDecoder().decode([DataModel].self, from: data)
}
```

### Task Groups
```swift
await withTaskGroup(of: Result<Data, Error>.self) { group in
    for url in urls {
        group.addTask { await self.fetchItem(from: url) }
    }
}
```

## Error Handling

### Custom Error Types
```swift
enum AppError: LocalizedError {
    case networkError(String)
    case decodingError
    case unauthorized
}
```
"""

XCODE_TROUBLESHOOTING = """# Xcode Troubleshooting Guide

## Common Build Errors

### "No such module" Error
1. Clean build folder (Shift+Cmd+K)
2. Delete derived data: `rm -rf ~/Library/Developer/Xcode/DerivedData`
3. Reopen project

### Code Signing Issues
1. Check Signing & Capabilities tab
2. Ensure correct team selected

## Performance Issues

### Slow Builds
- Enable build timing: Product > Perform Action > Build With Timing Summary
- Check for expensive type inference

### Memory Issues
- Use Instruments for memory profiling
- Check for retain cycles in closures
"""

# Relative path -> content, written only when missing
DEFAULT_DOCUMENTS = {
    "patterns/swift-patterns.md": SWIFT_PATTERNS,
    "tools/troubleshooting.md": XCODE_TROUBLESHOOTING,
}


def render_project_summary(project: Project) -> str:
    lines = [f"# {project.name}", ""]
    if project.description:
        lines += [project.description, ""]
    lines += ["## Location", f"`{project.path}`", ""]
    lines.append("## Tech Stack")
    lines += [f"- {tech}" for tech in project.tech_stack]
    lines.append("")
    if project.status:
        lines += ["## Status", project.status, ""]
    if project.current_tasks:
        lines.append("## Current Tasks")
        lines += [f"- [ ] {task}" for task in project.current_tasks]
        lines.append("")
    if project.notes:
        lines += ["## Notes", project.notes]
    return "\n".join(lines) + "\n"


def render_index(projects: Iterable[Project], now: datetime) -> str:
    lines = [
        "# Project Coordinator Index",
        "",
        f"Last Updated: {format_display(now)}",
        "",
        "## Active Projects",
        "",
    ]
    for project in sorted(projects, key=lambda p: p.name):
        lines.append(f"### {project.name}")
        lines.append(f"- **Location**: `{project.path}`")
        lines.append(f"- **Tech Stack**: {', '.join(project.tech_stack)}")
        if project.status:
            lines.append(f"- **Status**: {project.status}")
        lines.append(f"- **Last Modified**: {format_display(project.last_modified)}")
        lines.append("")
    lines.append(QUICK_REFERENCE)
    return "\n".join(lines)
