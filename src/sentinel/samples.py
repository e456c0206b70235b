"""Built-in sample inputs, one per scan type, for demos and smoke tests."""

from __future__ import annotations

from sentinel.report.models import ScanType

SAMPLES: dict[ScanType, str] = {
    ScanType.JAVA_CODE: """\
// Potential SQLi and IDOR
@GetMapping("/user/{id}")
public User getUser(@PathVariable Long id, @RequestParam String name) {
    String query = "SELECT * FROM users WHERE id = " + id + " AND name = '" + name + "'";
    return jdbcTemplate.queryForObject(query, User.class);
}""",
    ScanType.OPENAPI: """\
openapi: 3.0.0
info:
  title: Employee Payroll API
paths:
  /api/v1/salaries/{id}:
    get:
      summary: Get salary details
      parameters:
        - name: id
          in: path
          required: true
          schema:
            type: string""",
    ScanType.SMART_CONTRACT: """\
// Vulnerable to Reentrancy
contract Vault {
    mapping(address => uint) public balances;
    function withdraw() public {
        uint bal = balances[msg.sender];
        (bool sent, ) = msg.sender.call{value: bal}("");
        require(sent);
        balances[msg.sender] = 0;
    }
}""",
    ScanType.BUG_ANALYSIS: """\
Bug: Path Traversal in file upload.
Expected: Only allow .jpg and .png in /uploads/ directory.
Snippet:
public void saveFile(String path) {
    File file = new File("/var/www/data/" + path);
    // ... write file
}""",
}
